"""
File operation utilities
"""

from pathlib import Path
from typing import List

# Raster formats accepted as reference documents
IMAGE_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.tif', '.tiff', '.bmp'}


def is_image_file(name: str) -> bool:
    """Check the extension against the supported raster formats"""
    return Path(name).suffix.lower() in IMAGE_EXTENSIONS


def get_image_files(directory: str, recursive: bool = False) -> List[Path]:
    """
    Get all image files in directory, sorted by name.

    Extensions are matched case-insensitively. A missing directory yields
    an empty list.
    """
    path = Path(directory)
    if not path.is_dir():
        return []

    candidates = path.rglob('*') if recursive else path.iterdir()
    image_files = [f for f in candidates if f.is_file() and is_image_file(f.name)]

    return sorted(image_files, key=lambda f: str(f.relative_to(path)))


def ensure_directory(directory: str) -> Path:
    """Create directory (and parents) if missing"""
    path = Path(directory)
    path.mkdir(parents=True, exist_ok=True)
    return path


def format_file_size(size_bytes: int) -> str:
    """Format file size in human readable format"""
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if size_bytes < 1024.0:
            return f"{size_bytes:.2f} {unit}"
        size_bytes /= 1024.0
    return f"{size_bytes:.2f} PB"
