"""Custom exceptions for MarkDocx."""


class MarkDocxError(Exception):
    """Base exception for MarkDocx operations."""


class ConversionError(MarkDocxError):
    """The document could not be parsed or packaged."""


class InvalidInputError(MarkDocxError):
    """Input file is missing, empty or of an unsupported type."""


class ConfigError(MarkDocxError):
    """Configuration file could not be loaded."""
