# core/corpus.py

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

from core.errors import CorpusError, CorpusUnavailable, IOFailure
from security.input_validation import SecurityValidator
from utils.file_utils import ensure_directory, get_image_files

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReferenceImage:
    """A stored genuine sample"""
    name: str
    path: Path
    size_bytes: int

    @property
    def stem(self) -> str:
        """Lower-cased name without extension, used for exact-name matching"""
        return Path(self.name).stem.lower()


class CorpusIndex:
    """
    Directory-backed set of genuine reference images.

    Listing is a snapshot: the directory is re-read on every call so that
    references added by other requests show up on the next verification.
    """

    def __init__(self, corpus_dir: Union[str, Path]):
        self.corpus_dir = Path(corpus_dir)

    def list_references(self) -> List[ReferenceImage]:
        """
        Enumerate references in name order.

        A missing or unreadable corpus yields an empty list; an empty corpus
        is the bootstrap state, not a failure.
        """
        try:
            return self._scan()
        except CorpusUnavailable as e:
            logger.warning(f"Treating corpus as empty: {e}")
            return []

    def _scan(self) -> List[ReferenceImage]:
        if not self.corpus_dir.exists():
            logger.info(f"Corpus directory not found: {self.corpus_dir}")
            return []

        try:
            image_files = get_image_files(str(self.corpus_dir))
        except OSError as e:
            raise CorpusUnavailable(f"Cannot read {self.corpus_dir}: {e}") from e

        references = []
        for path in image_files:
            try:
                size = path.stat().st_size
            except OSError:
                # Removed between listing and stat
                continue
            references.append(ReferenceImage(name=path.name, path=path, size_bytes=size))

        return references

    def find_by_stem(self, stem: str,
                     references: Optional[List[ReferenceImage]] = None) -> Optional[ReferenceImage]:
        """First reference whose extension-less name matches, ignoring case"""
        if references is None:
            references = self.list_references()

        wanted = stem.lower()
        for reference in references:
            if reference.stem == wanted:
                return reference
        return None

    def add_reference(self, data: bytes, name: str) -> ReferenceImage:
        """
        Store a new genuine sample under its submitted name.

        Raises:
            CorpusError: the name is unusable or already taken
            IOFailure: the file could not be written
        """
        safe_name = SecurityValidator.sanitize_filename(name)
        if not safe_name or not Path(safe_name).stem:
            raise CorpusError(f"Invalid reference name: {name!r}")

        if not SecurityValidator.is_supported_image_name(safe_name):
            raise CorpusError(f"Unsupported reference format: {safe_name}")

        try:
            ensure_directory(str(self.corpus_dir))
        except OSError as e:
            raise IOFailure(f"Cannot create corpus directory {self.corpus_dir}: {e}") from e

        target = self.corpus_dir / safe_name
        if target.exists():
            raise CorpusError(f"Reference already exists: {safe_name}")

        # Write under a temporary name so concurrent listings never see a partial file
        temp_path = self.corpus_dir / f".{safe_name}.tmp"
        try:
            temp_path.write_bytes(data)
            os.replace(temp_path, target)
        except OSError as e:
            temp_path.unlink(missing_ok=True)
            raise IOFailure(f"Cannot write reference {safe_name}: {e}") from e

        logger.info(f"Added reference {safe_name} ({len(data)} bytes)")
        return ReferenceImage(name=safe_name, path=target, size_bytes=len(data))
