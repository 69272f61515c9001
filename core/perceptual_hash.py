# core/perceptual_hash.py

import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple, Union

import imagehash
import numpy as np
from PIL import Image, UnidentifiedImageError

from core.errors import DecodeError, IOFailure

logger = logging.getLogger(__name__)

# Guard against decompression bombs in uploaded documents
Image.MAX_IMAGE_PIXELS = 100_000_000  # 100MP limit


@dataclass(frozen=True)
class ImageFingerprint:
    """
    Fixed-length binary summary of an image's coarse luminance structure.

    One bit per grid cell in row-major order; a bit is set when the cell
    is brighter than the mean of the grid.
    """
    bits: Tuple[bool, ...]

    def __len__(self) -> int:
        return len(self.bits)

    def to_bitstring(self) -> str:
        return ''.join('1' if bit else '0' for bit in self.bits)

    @classmethod
    def from_bitstring(cls, value: str) -> 'ImageFingerprint':
        if not value or set(value) - {'0', '1'}:
            raise ValueError(f"Not a fingerprint bit string: {value!r}")
        return cls(bits=tuple(ch == '1' for ch in value))

    @classmethod
    def from_image_hash(cls, image_hash: imagehash.ImageHash) -> 'ImageFingerprint':
        flat = np.asarray(image_hash.hash, dtype=bool).flatten()
        return cls(bits=tuple(bool(bit) for bit in flat))


class PerceptualHasher:
    """
    Average-hash fingerprinting of document images
    """

    def __init__(self, hash_size: int = 8):
        self.hash_size = hash_size

    def hash(self, image_bytes: bytes) -> ImageFingerprint:
        """
        Compute the fingerprint of an encoded image.

        Raises:
            DecodeError: the bytes are not a decodable raster image
        """
        img = self._decode(image_bytes)

        # Resize large images to speed up processing
        if img.size[0] * img.size[1] > 2_000_000:  # 2MP limit
            img.thumbnail((1000, 1000), Image.Resampling.LANCZOS)

        # Grayscale, shrink to hash_size x hash_size, threshold on the mean
        ahash = imagehash.average_hash(img, hash_size=self.hash_size)
        return ImageFingerprint.from_image_hash(ahash)

    def hash_file(self, path: Union[str, Path]) -> ImageFingerprint:
        """Read an image from disk and compute its fingerprint"""
        try:
            data = Path(path).read_bytes()
        except OSError as e:
            raise IOFailure(f"Cannot read {path}: {e}") from e

        try:
            return self.hash(data)
        except DecodeError as e:
            raise DecodeError(f"{Path(path).name}: {e}") from e

    def _decode(self, image_bytes: bytes) -> Image.Image:
        if not image_bytes:
            raise DecodeError("empty image data")

        try:
            img = Image.open(io.BytesIO(image_bytes))
            img.load()
        except (UnidentifiedImageError, OSError, ValueError, SyntaxError,
                Image.DecompressionBombError) as e:
            logger.debug(f"Image decode failed: {e}")
            raise DecodeError(f"cannot decode image: {e}") from e

        return img
