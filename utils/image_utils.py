"""
Image utility functions
"""

import cv2
import numpy as np
from pathlib import Path
from typing import Optional


def is_grayscale(img: np.ndarray) -> bool:
    """True for single-channel images and colour images with equal channels"""
    if img.ndim == 2 or img.shape[2] == 1:
        return True

    bgr = img[:, :, :3]
    return bool(np.all(bgr[:, :, 0] == bgr[:, :, 1]) and np.all(bgr[:, :, 1] == bgr[:, :, 2]))


def get_image_info(image_path: str) -> Optional[dict]:
    """Dimensions and colour mode of a reference, None if OpenCV cannot read it"""
    path = Path(image_path)
    img = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)

    if img is None:
        return None

    return {
        'name': path.name,
        'width': img.shape[1],
        'height': img.shape[0],
        'channels': img.shape[2] if img.ndim == 3 else 1,
        'bit_depth': img.dtype.itemsize * 8,
        'mode': 'grayscale' if is_grayscale(img) else 'colour'
    }


def describe_image(image_path: str) -> str:
    """Short human readable summary for listings"""
    info = get_image_info(image_path)
    if info is None:
        return "unreadable"
    return f"{info['width']}x{info['height']}, {info['mode']}"
