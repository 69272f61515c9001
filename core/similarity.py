# core/similarity.py

from core.perceptual_hash import ImageFingerprint


def _clamp(score: float) -> float:
    return max(0.0, min(100.0, score))


class SimilarityScorer:
    """
    Turns fingerprints and file sizes into 0-100 similarity scores
    """

    def __init__(self, hash_weight: float = 0.7, size_weight: float = 0.3):
        self.hash_weight = hash_weight
        self.size_weight = size_weight

    @staticmethod
    def hash_similarity(fp_a: ImageFingerprint, fp_b: ImageFingerprint) -> float:
        """Percentage of bit positions on which the two fingerprints agree"""
        if len(fp_a) != len(fp_b):
            raise ValueError(
                f"Fingerprint lengths differ: {len(fp_a)} != {len(fp_b)}"
            )
        if len(fp_a) == 0:
            raise ValueError("Cannot compare empty fingerprints")

        agreeing = sum(1 for a, b in zip(fp_a.bits, fp_b.bits) if a == b)
        return _clamp(agreeing / len(fp_a) * 100)

    @staticmethod
    def size_similarity(size_a: int, size_b: int) -> float:
        """
        100 * (1 - |a - b| / max(a, b)); identical sizes (0/0 included)
        score 100
        """
        if size_a == size_b:
            return 100.0

        largest = max(size_a, size_b)
        return _clamp((1 - abs(size_a - size_b) / largest) * 100)

    def combined_similarity(self, hash_score: float, size_score: float) -> float:
        """Weighted blend of hash and size similarity"""
        return _clamp(hash_score * self.hash_weight + size_score * self.size_weight)
