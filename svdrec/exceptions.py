"""
Exception hierarchy for the SVD recommender
"""


class SVDRecError(Exception):
    """Base class for all library errors"""


class ShapeError(SVDRecError, ValueError):
    """Raised when an input matrix is not rectangular"""


class ConfigError(SVDRecError, ValueError):
    """Raised for invalid or unknown configuration values"""
