"""Fatal startup errors.

Everything here is raised before or while the listeners start; ``main()``
logs it once and exits non-zero. Per-request failures use ``HTTPException``.
"""


class MockServerError(Exception):
    """Base class for mock server startup failures."""


class ConfigError(MockServerError):
    """Route table or command-line settings are missing or malformed."""


class PidFileError(MockServerError):
    """The process identity record could not be written, read or signalled."""


class TlsMaterialError(MockServerError):
    """TLS key or certificate is unreadable or invalid."""
