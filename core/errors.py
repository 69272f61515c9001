# core/errors.py

"""
Error taxonomy for the verification pipeline.

Every error raised inside the pipeline derives from VerificationError so the
decision engine can convert it into a forged-by-default verdict.
"""


class VerificationError(Exception):
    """Base class for all verification pipeline errors"""


class DecodeError(VerificationError):
    """Image bytes could not be decoded as a raster image"""


class IOFailure(VerificationError):
    """Disk read or write failed"""


class CorpusUnavailable(VerificationError):
    """Reference corpus directory exists but cannot be read"""


class CorpusError(VerificationError):
    """A reference could not be registered in the corpus"""


class ConfigError(VerificationError):
    """Invalid threshold, weight or worker setting"""


class DeadlineExceeded(VerificationError):
    """Verification ran past the caller's deadline"""


class ComparisonFailed(VerificationError):
    """
    Comparing the upload against one reference failed.

    Carries the reference name and the underlying cause so the verdict
    reason can point at the offending file.
    """

    def __init__(self, reference_name: str, cause: Exception):
        self.reference_name = reference_name
        self.cause = cause
        super().__init__(f"comparison with {reference_name} failed: {cause}")
