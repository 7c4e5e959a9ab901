"""
Defines custom exceptions for the application to allow for more specific error handling.
"""


class AgpLocalError(Exception):
    """Base exception for all application-specific errors."""


class ConfigurationError(AgpLocalError):
    """Raised for issues related to configuration loading or validation."""


class StoreIOError(AgpLocalError):
    """Raised when a record file could not be written or removed at the OS level."""


class StoreWriteError(StoreIOError):
    """Raised when a record could not be persisted; the previous file is kept."""


class DeserializationError(AgpLocalError):
    """Raised when a stored record is unreadable or does not match its model."""


class FetchError(AgpLocalError):
    """Raised when the package payload could not be retrieved or was empty."""


class ExtractionError(AgpLocalError):
    """
    Raised when a package archive is corrupt, unsupported, or could not be
    written to disk.
    """


class LaunchError(AgpLocalError):
    """Raised when an entrypoint is missing or its process could not be started."""
