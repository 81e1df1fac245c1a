class ConversionError(Exception):
    """Base class for everything that aborts a conversion request."""


class InvalidArgument(ConversionError, ValueError):
    """Malformed quantizer input or rendering options."""


class MissingInput(ConversionError, ValueError):
    """Required companion data is absent, e.g. shape markup in shape mode."""


class EmptyImage(ConversionError):
    """Source image has zero width or height."""


class DecodeFailure(ConversionError):
    """Source image could not be decoded."""


class InternalInvariantViolation(ConversionError, RuntimeError):
    """An algorithmic impossibility; indicates a bug rather than bad input."""
