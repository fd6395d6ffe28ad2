"""
Exception hierarchy for the dense SIFT extractor.

Every failure the extractor can report derives from :class:`DenseSiftError`,
so callers can surface any of them with a single ``except`` clause while
still being able to tell grid-solving, sampling and I/O problems apart.
"""

from typing import Any, Dict, Optional


class DenseSiftError(Exception):
    """Base class for all extractor errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ConfigError(DenseSiftError):
    """Invalid configuration value."""


# Grid solving

class GridError(DenseSiftError):
    """Base class for grid-parameter errors."""


class InfeasibleDensityError(GridError):
    """Requested feature count is outside ``1 .. width * height``."""


class DegenerateGeometryError(GridError):
    """Image dimensions or grid interval are not positive."""


# Offset search

class SamplingError(DenseSiftError):
    """Base class for offset-search failures."""


class UnsatisfiableGridError(SamplingError):
    """The offset dropped below zero before the count matched."""


class ConvergenceTimeoutError(SamplingError):
    """The offset search exceeded its iteration cap."""


class SamplingNotImplementedError(DenseSiftError):
    """The requested sampling mode has no implementation."""


# Extraction state

class ExtractionError(DenseSiftError):
    """Descriptor computation broke the keypoint/descriptor pairing."""


class NotExtractedError(DenseSiftError):
    """Output was requested before features were extracted."""


# I/O boundary

class ImageError(DenseSiftError):
    """Base class for image I/O errors."""


class ImageLoadError(ImageError):
    """Image file is missing or cannot be decoded."""


class ImageWriteError(ImageError):
    """Image file cannot be written."""


class OutputError(DenseSiftError):
    """Base class for feature-file errors."""


class FeatureWriteError(OutputError):
    """Feature file cannot be written."""


class FeatureReadError(OutputError):
    """Feature file is missing, truncated or malformed."""
