# core/batch_processor.py

from concurrent.futures import ThreadPoolExecutor, TimeoutError as FuturesTimeout
from typing import Any, Callable, List, Optional, Sequence

from tqdm import tqdm

from core.deadline import Deadline
from core.errors import DeadlineExceeded


class BatchProcessor:
    """
    Bounded fan-out for per-reference work.

    Results always come back in input order, so any reduction over them is
    the same whether the work ran on one thread or many.
    """

    def __init__(self, n_workers: int = 4, show_progress: bool = False):
        self.n_workers = max(1, n_workers)
        self.show_progress = show_progress

    def map_ordered(self,
                    process_func: Callable[[Any], Any],
                    items: Sequence[Any],
                    deadline: Optional[Deadline] = None,
                    desc: str = "Processing images") -> List[Any]:
        """
        Apply process_func to every item, preserving order

        Args:
            process_func: Function to apply to each item
            items: Work items
            deadline: Optional budget; checked between items and used as the
                      wait timeout for threaded work

        Returns:
            List of results in the order of items

        Raises:
            DeadlineExceeded: the deadline ran out before all items finished
        """
        deadline = deadline or Deadline.never()

        if self.n_workers == 1 or len(items) <= 1:
            return self._map_sequential(process_func, items, deadline, desc)

        return self._map_threaded(process_func, items, deadline, desc)

    def _map_sequential(self, process_func, items, deadline, desc):
        results = []
        for item in tqdm(items, desc=desc, disable=not self.show_progress):
            deadline.check("reference comparison")
            results.append(process_func(item))
        return results

    def _map_threaded(self, process_func, items, deadline, desc):
        deadline.check("reference comparison")

        executor = ThreadPoolExecutor(max_workers=self.n_workers)
        try:
            result_iter = executor.map(process_func, items, timeout=deadline.remaining())
            results = list(tqdm(
                result_iter,
                total=len(items),
                desc=desc,
                disable=not self.show_progress
            ))
        except FuturesTimeout as e:
            executor.shutdown(wait=False, cancel_futures=True)
            raise DeadlineExceeded(
                f"verification exceeded {deadline.seconds:.1f}s budget during reference comparison"
            ) from e
        except BaseException:
            executor.shutdown(wait=False, cancel_futures=True)
            raise

        executor.shutdown(wait=True)
        return results
