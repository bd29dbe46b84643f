"""Mocker exception hierarchy."""


class MockerError(Exception):
    """Base for all mocker-specific errors."""


class ConfigError(MockerError):
    """Raised when the mock configuration is malformed or ambiguous.

    Always raised before the server starts listening.
    """


class SerializationError(MockerError):
    """Raised when a configured response body cannot be encoded as JSON."""


class SelfUpdateError(MockerError):
    """Raised when the update flow cannot download or install a release."""
