"""
Custom exceptions for rkunpack.

Defines a hierarchy of exceptions for the error conditions
encountered while recognizing and unpacking firmware images.
"""


class RKUnpackError(Exception):
    """Base exception for all rkunpack errors."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


# ============================================================================
# Extraction Errors
# ============================================================================

class ExtractionError(RKUnpackError):
    """Base class for image extraction errors."""
    pass


class UnrecognizedFormatError(ExtractionError):
    """Leading signature matches neither RKFW nor RKAF."""

    def __init__(self, signature: bytes):
        super().__init__(
            "Unrecognized image format",
            details={"signature": signature.hex() or "<empty>"},
        )
        self.signature = signature


class MalformedHeaderError(ExtractionError):
    """Header is too short, carries a bad magic tag or an unusable field."""
    pass


class InvalidTimestampError(ExtractionError):
    """Packed build date/time fields are outside the calendar range."""
    pass


class MissingEmbeddedPackageError(ExtractionError):
    """RKFW image does not carry an RKAF package at the advertised offset."""
    pass


class TruncatedRegionError(ExtractionError):
    """Source ran out of bytes before a region was fully copied."""
    pass


# ============================================================================
# Configuration Errors
# ============================================================================

class ConfigurationError(RKUnpackError):
    """Base class for configuration errors."""
    pass


class InvalidConfigError(ConfigurationError):
    """Configuration file is invalid."""
    pass


# ============================================================================
# Helper Functions
# ============================================================================

def format_exception_chain(exc: Exception) -> str:
    """Format exception chain for logging."""
    chain = []
    current = exc
    while current:
        chain.append(f"{type(current).__name__}: {current}")
        current = current.__cause__
    return " -> ".join(chain)
