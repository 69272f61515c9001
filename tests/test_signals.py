# tests/test_signals.py

import pytest

from config import DEFAULT_FRAUD_PATH_MARKERS
from core.signals import SignalCollector


@pytest.fixture
def collector():
    return SignalCollector(DEFAULT_FRAUD_PATH_MARKERS)


@pytest.mark.parametrize("filename", [
    "document_genuine.png", "ORIGINAL_scan.jpg", "Authentic-ID.tif"
])
def test_genuine_keywords(collector, filename):
    signals = collector.collect(filename, "/uploads/document-1.png")
    assert signals.genuine_hint
    assert not signals.fraud_hint
    assert signals.trusted_genuine


@pytest.mark.parametrize("filename", [
    "fraud_case.png", "FAKE.jpg", "forged_invoice.png", "forgery.bmp"
])
def test_fraud_keywords(collector, filename):
    signals = collector.collect(filename, "/uploads/document-1.png")
    assert signals.fraud_hint
    assert signals.fraud_signal


@pytest.mark.parametrize("storage_path", [
    "/dataset/CopyPaste_Inter/0001.png",
    "/dataset/copypaste_intra/0002.png",
    "/dataset/IMITATION/0003.png",
])
def test_fraud_path_markers(collector, storage_path):
    signals = collector.collect("scan.png", storage_path)
    assert signals.fraud_path_hint
    assert signals.fraud_signal


def test_fraud_path_cancels_trust(collector):
    signals = collector.collect("document_genuine.png", "/dataset/Imitation/document_genuine.png")
    assert signals.genuine_hint
    assert not signals.trusted_genuine


def test_mixed_keywords_are_not_trusted(collector):
    signals = collector.collect("genuine_fake.png", "/uploads/x.png")
    assert signals.genuine_hint and signals.fraud_hint
    assert not signals.trusted_genuine


def test_neutral_upload(collector):
    signals = collector.collect("random.png", "/uploads/document-1.png")
    assert not (signals.genuine_hint or signals.fraud_hint or signals.fraud_path_hint)


def test_custom_markers():
    collector = SignalCollector(["tampered"])
    assert collector.collect("a.png", "/data/Tampered/a.png").fraud_path_hint
    assert not collector.collect("a.png", "/data/Imitation/a.png").fraud_path_hint


def test_missing_metadata():
    signals = SignalCollector().collect(None, None)
    assert not signals.fraud_signal
    assert not signals.genuine_hint
