# core/verdict.py

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Optional

from core.corpus import ReferenceImage


class Rule(str, Enum):
    """Which step of the decision engine produced the verdict"""
    BOOTSTRAP_REGISTERED = "bootstrap_registered"
    NO_REFERENCES = "no_references"
    EXACT_NAME = "exact_name"
    FRAUD_SIGNAL = "fraud_signal"
    SIMILARITY = "similarity"
    GENUINE_HINT = "genuine_hint"
    BELOW_THRESHOLD = "below_threshold"
    PIXEL_FORGERY = "pixel_forgery"
    PROCESSING_ERROR = "processing_error"
    DEADLINE_EXCEEDED = "deadline_exceeded"


@dataclass(frozen=True)
class ComparisonResult:
    """Hash similarity of the upload against one reference"""
    reference: ReferenceImage
    hash_similarity: float


@dataclass(frozen=True)
class Evidence:
    """Breakdown of the signals behind a verdict"""
    rule: Rule
    hash_similarity: Optional[float] = None
    size_similarity: Optional[float] = None
    genuine_hint: bool = False
    fraud_hint: bool = False
    fraud_path_hint: bool = False
    references_compared: int = 0


@dataclass(frozen=True)
class Verdict:
    """Final genuine / forged decision for one upload"""
    is_forged: bool
    similarity: float
    reason: str
    best_match: Optional[str] = None
    evidence: Evidence = field(default_factory=lambda: Evidence(rule=Rule.PROCESSING_ERROR))

    @property
    def is_genuine(self) -> bool:
        return not self.is_forged

    @property
    def message(self) -> str:
        if self.is_forged:
            return "Document appears to be forged"
        return "Document appears to be genuine"

    def to_dict(self) -> dict:
        """JSON-ready representation"""
        evidence = asdict(self.evidence)
        evidence['rule'] = self.evidence.rule.value
        return {
            'is_forged': self.is_forged,
            'is_genuine': self.is_genuine,
            'similarity': round(self.similarity, 2),
            'best_match': self.best_match,
            'reason': self.reason,
            'message': self.message,
            'evidence': evidence
        }
