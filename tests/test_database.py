# tests/test_database.py

import pytest

from core.database import FingerprintCache
from core.perceptual_hash import ImageFingerprint


@pytest.fixture
def cache():
    cache = FingerprintCache(":memory:")
    yield cache
    cache.close()


FINGERPRINT = ImageFingerprint.from_bitstring("0110" * 16)


def test_cache_round_trip(cache):
    cache.put("/corpus/a.png", 1024, 1700000000.5, 8, FINGERPRINT)

    assert cache.get("/corpus/a.png", 1024, 1700000000.5, 8) == FINGERPRINT
    assert cache.count() == 1


def test_cache_miss(cache):
    assert cache.get("/corpus/missing.png", 1, 1.0, 8) is None


@pytest.mark.parametrize("size,mtime,hash_size", [
    (2048, 1700000000.5, 8),
    (1024, 1700000099.0, 8),
    (1024, 1700000000.5, 16),
])
def test_stale_entries_are_ignored(cache, size, mtime, hash_size):
    cache.put("/corpus/a.png", 1024, 1700000000.5, 8, FINGERPRINT)

    assert cache.get("/corpus/a.png", size, mtime, hash_size) is None


def test_put_replaces_entry(cache):
    updated = ImageFingerprint.from_bitstring("1" * 64)
    cache.put("/corpus/a.png", 1024, 1.0, 8, FINGERPRINT)
    cache.put("/corpus/a.png", 2048, 2.0, 8, updated)

    assert cache.count() == 1
    assert cache.get("/corpus/a.png", 2048, 2.0, 8) == updated


def test_cache_persists_on_disk(tmp_path):
    path = str(tmp_path / "nested" / "fingerprints.db")
    cache = FingerprintCache(path)
    cache.put("/corpus/a.png", 1024, 1.0, 8, FINGERPRINT)
    cache.close()

    reopened = FingerprintCache(path)
    assert reopened.get("/corpus/a.png", 1024, 1.0, 8) == FINGERPRINT
    reopened.close()
