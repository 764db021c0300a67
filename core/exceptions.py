# =============================================================================
# core/exceptions.py  —  Error taxonomy for the Apollo.io bridge
# =============================================================================
#
# Every failure the client can produce is an ApolloError.  The dispatcher
# catches ApolloError (and anything else) at the tool boundary and turns it
# into an error-flagged text payload; nothing here ever reaches the MCP
# runtime as an uncaught fault.
#
#   ApolloError
#   ├── ConfigurationError   missing credential, fatal at startup
#   ├── ValidationError      bad/missing argument, no network call issued
#   │   └── EmptyResultError compound lookup found nothing usable
#   ├── UpstreamHTTPError    non-2xx response from Apollo
#   └── TransportError       DNS / timeout / refused connection
# =============================================================================


class ApolloError(Exception):
    """Base class for every error raised by the bridge."""


class ConfigurationError(ApolloError):
    """Raised when required process configuration (the API key) is missing."""


class ValidationError(ApolloError):
    """Raised when tool arguments are missing or malformed."""


class EmptyResultError(ValidationError):
    """Raised when a lookup step returns nothing the next step can use."""


class UpstreamHTTPError(ApolloError):
    """Raised when Apollo answers with a non-2xx status."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"{status_code} - {message}")


class TransportError(ApolloError):
    """Raised when the request never got an HTTP answer."""
