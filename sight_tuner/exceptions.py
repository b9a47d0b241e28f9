"""Exception types raised by Sight Tuner."""


class SightTunerError(Exception):
    """Base class for all Sight Tuner errors."""


class InvalidInputError(SightTunerError, ValueError):
    """Raised when a sample buffer or sample rate cannot be analysed."""


class ConfigError(SightTunerError, ValueError):
    """Raised for unknown smoothing or display modes."""
