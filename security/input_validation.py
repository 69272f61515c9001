# security/input_validation.py

import os
import re
from pathlib import Path
from typing import Optional

from utils.file_utils import is_image_file


class SecurityValidator:
    """
    Validate uploads and reference names before they reach the engine
    """

    MAX_FILE_SIZE = 10 * 1024 * 1024  # 10 MB
    MAX_NAME_LENGTH = 255

    @staticmethod
    def validate_upload(path: str, max_bytes: int = MAX_FILE_SIZE) -> Optional[str]:
        """
        Check an upload before verification.

        Returns:
            None when the upload is acceptable, otherwise a message
            describing why it was rejected
        """
        try:
            path_obj = Path(path).resolve()

            # Ensure file exists and is a file (not directory)
            if not path_obj.is_file():
                return f"No such file: {path}"

            size = path_obj.stat().st_size
            if size == 0:
                return f"Upload is empty: {path}"

            if size > max_bytes:
                return (f"Upload exceeds size limit: {size} bytes "
                        f"(max {max_bytes} bytes)")

            if not os.access(path_obj, os.R_OK):
                return f"Upload is not readable: {path}"

        except OSError as e:
            return f"Cannot inspect upload {path}: {e}"

        return None

    @staticmethod
    def is_supported_image_name(filename: str) -> bool:
        """Only raster formats the corpus understands are accepted"""
        return is_image_file(filename)

    @staticmethod
    def sanitize_filename(filename: str) -> str:
        """
        Sanitize filename to prevent path traversal when storing references
        """
        # Remove path separators
        filename = filename.replace('/', '_').replace('\\', '_')

        # Remove special characters
        filename = re.sub(r'[^\w\s.-]', '', filename).strip()

        # No hidden files or bare dots
        filename = filename.lstrip('.')

        # Limit length
        if len(filename) > SecurityValidator.MAX_NAME_LENGTH:
            name, ext = os.path.splitext(filename)
            filename = name[:SecurityValidator.MAX_NAME_LENGTH - 5] + ext

        return filename
