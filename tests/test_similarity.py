# tests/test_similarity.py

import pytest

from core.perceptual_hash import ImageFingerprint
from core.similarity import SimilarityScorer


def test_hash_similarity_counts_agreeing_bits():
    a = ImageFingerprint.from_bitstring("1111000011110000")
    b = ImageFingerprint.from_bitstring("1111000000001111")
    assert SimilarityScorer.hash_similarity(a, b) == 50.0


def test_hash_similarity_of_opposites_is_zero():
    a = ImageFingerprint.from_bitstring("10" * 32)
    b = ImageFingerprint.from_bitstring("01" * 32)
    assert SimilarityScorer.hash_similarity(a, b) == 0.0


def test_hash_similarity_rejects_length_mismatch():
    a = ImageFingerprint.from_bitstring("1" * 64)
    b = ImageFingerprint.from_bitstring("1" * 256)
    with pytest.raises(ValueError):
        SimilarityScorer.hash_similarity(a, b)


@pytest.mark.parametrize("size", [0, 1, 1024, 10 * 1024 * 1024])
def test_equal_sizes_score_100(size):
    assert SimilarityScorer.size_similarity(size, size) == 100.0


def test_size_similarity_formula():
    assert SimilarityScorer.size_similarity(100, 50) == pytest.approx(50.0)
    assert SimilarityScorer.size_similarity(50, 100) == pytest.approx(50.0)
    assert SimilarityScorer.size_similarity(1000, 900) == pytest.approx(90.0)


def test_size_similarity_against_empty_file():
    assert SimilarityScorer.size_similarity(0, 4096) == 0.0


def test_combined_similarity_default_weights():
    scorer = SimilarityScorer()
    assert scorer.combined_similarity(100, 0) == pytest.approx(70.0)
    assert scorer.combined_similarity(0, 100) == pytest.approx(30.0)
    assert scorer.combined_similarity(100, 100) == pytest.approx(100.0)


def test_combined_similarity_custom_weights():
    scorer = SimilarityScorer(hash_weight=0.5, size_weight=0.5)
    assert scorer.combined_similarity(80, 40) == pytest.approx(60.0)


def test_scores_stay_in_range():
    scorer = SimilarityScorer(hash_weight=1.0, size_weight=1.0)
    assert scorer.combined_similarity(100, 100) == 100.0
