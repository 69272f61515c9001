# tests/test_image_utils.py

import numpy as np

from conftest import gradient_image, noise_image, write_image
from utils.file_utils import format_file_size, get_image_files
from utils.image_utils import describe_image, get_image_info, is_grayscale


def test_info_for_colour_image(tmp_path):
    path = write_image(tmp_path / "photo.png", noise_image(seed=5, size=40))
    info = get_image_info(str(path))

    assert info['width'] == 40
    assert info['height'] == 40
    assert info['channels'] == 3
    assert info['bit_depth'] == 8
    assert info['mode'] == 'colour'


def test_scanned_page_is_grayscale(tmp_path):
    path = write_image(tmp_path / "scan.png", gradient_image(32))

    assert describe_image(str(path)) == "32x32, grayscale"


def test_single_channel_is_grayscale():
    assert is_grayscale(np.zeros((4, 4), dtype=np.uint8))


def test_unreadable_file(tmp_path):
    path = tmp_path / "broken.png"
    path.write_bytes(b"garbage")

    assert get_image_info(str(path)) is None
    assert describe_image(str(path)) == "unreadable"


def test_recursive_listing(tmp_path):
    write_image(tmp_path / "b" / "inner.png", gradient_image(16))
    write_image(tmp_path / "a.png", gradient_image(16))

    names = [p.relative_to(tmp_path).as_posix() for p in get_image_files(str(tmp_path), recursive=True)]

    assert names == ["a.png", "b/inner.png"]


def test_format_file_size():
    assert format_file_size(512) == "512.00 B"
    assert format_file_size(10 * 1024 * 1024) == "10.00 MB"
