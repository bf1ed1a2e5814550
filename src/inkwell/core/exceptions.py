"""
Inkwell exception hierarchy.

All inkwell exceptions inherit from InkwellError, making it easy for consumers
to catch library-level errors while still distinguishing specific failure modes.
"""


class InkwellError(Exception):
    """Base exception class for all inkwell errors."""


class ConfigurationError(InkwellError):
    """Raised for configuration errors (missing keys, invalid values)."""


class DocumentDecodeError(InkwellError):
    """Raised when a backing document cannot be decoded into entries."""
