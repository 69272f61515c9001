# tests/conftest.py

import cv2
import numpy as np
import pytest


def gradient_image(size: int = 224) -> np.ndarray:
    """Horizontal dark-to-bright ramp"""
    row = np.linspace(0, 255, size).astype(np.uint8)
    gray = np.tile(row, (size, 1))
    return cv2.cvtColor(gray, cv2.COLOR_GRAY2BGR)


def checkerboard_image(size: int = 224, cells: int = 4) -> np.ndarray:
    """Large black and white squares"""
    block = size // cells
    gray = np.zeros((size, size), dtype=np.uint8)
    for y in range(cells):
        for x in range(cells):
            if (x + y) % 2 == 0:
                gray[y * block:(y + 1) * block, x * block:(x + 1) * block] = 255
    return cv2.cvtColor(gray, cv2.COLOR_GRAY2BGR)


def noise_image(seed: int, size: int = 224) -> np.ndarray:
    rng = np.random.default_rng(seed)
    return rng.integers(0, 255, (size, size, 3), dtype=np.uint8)


def write_image(path, img: np.ndarray):
    path.parent.mkdir(parents=True, exist_ok=True)
    assert cv2.imwrite(str(path), img)
    return path


def encode_png(img: np.ndarray) -> bytes:
    ok, buffer = cv2.imencode('.png', img)
    assert ok
    return buffer.tobytes()


@pytest.fixture
def corpus_dir(tmp_path):
    """Corpus with three structurally different references"""
    corpus = tmp_path / "genuine"
    write_image(corpus / "reference_gradient.png", gradient_image())
    write_image(corpus / "reference_checker.png", checkerboard_image())
    write_image(corpus / "reference_noise.png", noise_image(seed=1))
    return corpus


@pytest.fixture
def empty_corpus(tmp_path):
    return tmp_path / "empty_genuine"
