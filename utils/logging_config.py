# utils/logging_config.py

import json
import logging
import logging.handlers
import sys
from datetime import datetime
from pathlib import Path

CONSOLE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'


def setup_logging(log_level: str = "INFO", log_dir: str = "logs",
                  app_name: str = "doc_verifier") -> logging.Logger:
    """
    Configure the root logger with console and rotating file output
    """
    level = getattr(logging, str(log_level).upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)

    # Idempotent: drop handlers from a previous setup call
    for handler in list(root.handlers):
        if getattr(handler, '_doc_verifier', False):
            root.removeHandler(handler)
            handler.close()

    # Console handler (stderr keeps stdout free for JSON verdicts)
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    console_handler._doc_verifier = True
    root.addHandler(console_handler)

    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        # File handler (rotating)
        file_handler = logging.handlers.RotatingFileHandler(
            log_path / f"{app_name}.log",
            maxBytes=10*1024*1024,  # 10 MB
            backupCount=5
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        file_handler._doc_verifier = True
        root.addHandler(file_handler)

    return root


class JSONFormatter(logging.Formatter):
    """Format logs as JSON"""

    def format(self, record):
        log_data = {
            'timestamp': datetime.fromtimestamp(record.created).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno
        }

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data)


class VerificationLogger:
    """
    Structured audit trail: one JSON record per verdict
    """

    def __init__(self, name: str = "verdicts", log_dir: str = "logs"):
        self.name = name
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.logger = self._setup_logger()

    def _setup_logger(self) -> logging.Logger:
        """Setup logger with a rotating JSON handler"""
        logger = logging.getLogger(f"audit.{self.name}")
        logger.setLevel(logging.INFO)
        logger.propagate = False

        target = str(self.log_dir / f"{self.name}_structured.json")
        for handler in logger.handlers:
            if getattr(handler, 'baseFilename', None) == str(Path(target).resolve()):
                return logger

        json_handler = logging.handlers.RotatingFileHandler(
            target,
            maxBytes=10*1024*1024,
            backupCount=5
        )
        json_handler.setLevel(logging.INFO)
        json_handler.setFormatter(JSONFormatter())
        logger.addHandler(json_handler)

        return logger

    def log_operation(self, operation: str, **kwargs):
        """Log structured operation data"""
        data = {
            'operation': operation,
            'timestamp': datetime.now().isoformat(),
            **kwargs
        }
        self.logger.info(json.dumps(data))

    def log_verdict(self, file_name: str, storage_path: str, verdict_dict: dict):
        """Record one verification outcome"""
        self.log_operation(
            'verify',
            file_name=file_name,
            storage_path=storage_path,
            **verdict_dict
        )

    def close(self):
        for handler in list(self.logger.handlers):
            self.logger.removeHandler(handler)
            handler.close()
