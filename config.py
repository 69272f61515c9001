from dataclasses import dataclass, field
from typing import List
import yaml
from pathlib import Path

from core.errors import ConfigError

DEFAULT_FRAUD_PATH_MARKERS = ["CopyPaste_Inter", "CopyPaste_Intra", "Imitation"]

_TRUE_STRINGS = {'true', 'yes', 'on', '1'}
_FALSE_STRINGS = {'false', 'no', 'off', '0'}


def _parse_bool(name: str, value) -> bool:
    """YAML booleans, plus the usual spellings when the value was quoted"""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    raise ConfigError(f"{name} must be a boolean, got {value!r}")


def _parse_markers(name: str, value) -> List[str]:
    """A single marker or a list of markers"""
    if isinstance(value, str):
        return [value]
    if isinstance(value, list) and all(isinstance(item, str) for item in value):
        return list(value)
    raise ConfigError(f"{name} must be a string or a list of strings, got {value!r}")



@dataclass
class VerificationConfig:
    """Configuration for the decision engine"""
    similarity_threshold: float = 85.0
    pixel_forgery_threshold: float = 80.0  # Capped at similarity_threshold
    hash_weight: float = 0.7
    size_weight: float = 0.3
    hash_size: int = 8  # 8x8 luminance grid
    n_workers: int = 4
    use_cache: bool = False
    max_upload_bytes: int = 10 * 1024 * 1024  # 10 MB
    upload_timeout_seconds: float = 30.0
    fraud_path_markers: List[str] = field(
        default_factory=lambda: list(DEFAULT_FRAUD_PATH_MARKERS)
    )

    def validate(self) -> 'VerificationConfig':
        """Raise ConfigError if any threshold, weight or limit is out of range"""
        for name in ('similarity_threshold', 'pixel_forgery_threshold'):
            value = getattr(self, name)
            if not 0.0 <= value <= 100.0:
                raise ConfigError(f"{name} must be within [0, 100], got {value}")

        if self.hash_weight < 0 or self.size_weight < 0:
            raise ConfigError("hash_weight and size_weight must be non-negative")

        # Weights must sum to 1 so the combined score stays within [0, 100]
        if abs(self.hash_weight + self.size_weight - 1.0) > 1e-6:
            raise ConfigError(
                f"hash_weight + size_weight must equal 1.0, "
                f"got {self.hash_weight + self.size_weight}"
            )

        if self.hash_size < 2:
            raise ConfigError(f"hash_size must be at least 2, got {self.hash_size}")

        if self.n_workers < 1:
            raise ConfigError(f"n_workers must be at least 1, got {self.n_workers}")

        if self.max_upload_bytes <= 0:
            raise ConfigError("max_upload_bytes must be positive")

        if self.upload_timeout_seconds <= 0:
            raise ConfigError("upload_timeout_seconds must be positive")

        return self


@dataclass
class SystemConfig:
    """System-wide configuration"""
    corpus_dir: str = "data/genuine"
    cache_path: str = "data/fingerprints.db"
    log_dir: str = "logs"
    log_level: str = "INFO"

    # Decision engine
    verification: VerificationConfig = field(
        default_factory=VerificationConfig
    )

    def save(self, path: str = "config.yaml"):
        """Save configuration to YAML file"""
        config_dict = {
            'corpus_dir': self.corpus_dir,
            'cache_path': self.cache_path,
            'log_dir': self.log_dir,
            'log_level': self.log_level,
            'verification': {
                'similarity_threshold': self.verification.similarity_threshold,
                'pixel_forgery_threshold': self.verification.pixel_forgery_threshold,
                'hash_weight': self.verification.hash_weight,
                'size_weight': self.verification.size_weight,
                'hash_size': self.verification.hash_size,
                'n_workers': self.verification.n_workers,
                'use_cache': self.verification.use_cache,
                'max_upload_bytes': self.verification.max_upload_bytes,
                'upload_timeout_seconds': self.verification.upload_timeout_seconds,
                'fraud_path_markers': list(self.verification.fraud_path_markers)
            }
        }

        with open(path, 'w') as f:
            yaml.dump(config_dict, f, default_flow_style=False, indent=2)

    @classmethod
    def load(cls, path: str = "config.yaml") -> 'SystemConfig':
        """Load configuration from YAML file"""
        if not Path(path).exists():
            return cls()  # Return default config

        try:
            with open(path, 'r') as f:
                config_dict = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Cannot parse {path}: {e}") from e

        if not isinstance(config_dict, dict):
            raise ConfigError(f"{path} must contain a mapping at the top level")

        config = cls()

        # Load system settings
        config.corpus_dir = config_dict.get('corpus_dir', config.corpus_dir)
        config.cache_path = config_dict.get('cache_path', config.cache_path)
        config.log_dir = config_dict.get('log_dir', config.log_dir)
        config.log_level = config_dict.get('log_level', config.log_level)

        # Load decision engine settings
        if 'verification' in config_dict:
            vc = config_dict['verification'] or {}
            defaults = config.verification
            try:
                config.verification = VerificationConfig(
                    similarity_threshold=float(vc.get('similarity_threshold', defaults.similarity_threshold)),
                    pixel_forgery_threshold=float(vc.get('pixel_forgery_threshold', defaults.pixel_forgery_threshold)),
                    hash_weight=float(vc.get('hash_weight', defaults.hash_weight)),
                    size_weight=float(vc.get('size_weight', defaults.size_weight)),
                    hash_size=int(vc.get('hash_size', defaults.hash_size)),
                    n_workers=int(vc.get('n_workers', defaults.n_workers)),
                    use_cache=_parse_bool('use_cache', vc.get('use_cache', defaults.use_cache)),
                    max_upload_bytes=int(vc.get('max_upload_bytes', defaults.max_upload_bytes)),
                    upload_timeout_seconds=float(vc.get('upload_timeout_seconds', defaults.upload_timeout_seconds)),
                    fraud_path_markers=_parse_markers(
                        'fraud_path_markers', vc.get('fraud_path_markers', defaults.fraud_path_markers)
                    )
                )
            except (AttributeError, TypeError, ValueError) as e:
                raise ConfigError(f"Invalid verification settings in {path}: {e}") from e

        config.verification.validate()

        return config
