"""
Error types raised by calltrace.
"""


class CallTraceError(Exception):
    """Base class for fatal calltrace errors."""
    pass


class ConfigurationError(CallTraceError):
    """Raised when the run is configured so that nothing sensible can be fetched."""
    pass


class AbiFormatError(CallTraceError):
    """Raised when an ABI document cannot be read or has an unknown shape."""
    pass


class CredentialsError(CallTraceError):
    """Raised when a credentials file cannot be read or is incomplete."""
    pass


class TraceSourceError(CallTraceError):
    """Raised when the trace warehouse rejects or fails a query."""
    pass
