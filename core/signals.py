# core/signals.py

from dataclasses import dataclass
from typing import Iterable, Optional

GENUINE_KEYWORDS = ("genuine", "original", "authentic")
FRAUD_KEYWORDS = ("fraud", "fake", "forg")  # "forg" covers forged / forgery


@dataclass(frozen=True)
class Signals:
    """Metadata-only evidence about an upload"""
    genuine_hint: bool = False
    fraud_hint: bool = False
    fraud_path_hint: bool = False

    @property
    def fraud_signal(self) -> bool:
        return self.fraud_hint or self.fraud_path_hint

    @property
    def trusted_genuine(self) -> bool:
        """Genuine-sounding name with no fraud evidence of either kind"""
        return self.genuine_hint and not self.fraud_signal


class SignalCollector:
    """
    Keyword heuristics over the upload's filename and storage path.

    These signals are weak and easy to game; the decision engine only lets
    them narrow or override pixel evidence, never replace it.
    """

    def __init__(self, fraud_path_markers: Optional[Iterable[str]] = None):
        self.fraud_path_markers = tuple(
            marker.lower() for marker in (fraud_path_markers or ()) if marker
        )

    def collect(self, original_filename: str, storage_path: str) -> Signals:
        filename = (original_filename or "").lower()
        path = (storage_path or "").lower()

        return Signals(
            genuine_hint=any(keyword in filename for keyword in GENUINE_KEYWORDS),
            fraud_hint=any(keyword in filename for keyword in FRAUD_KEYWORDS),
            fraud_path_hint=any(marker in path for marker in self.fraud_path_markers)
        )
