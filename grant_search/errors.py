"""Error taxonomy for upstream sources, configuration and user input."""

from typing import Optional


class GrantSearchError(Exception):
    """Base class for all grant search errors."""


class InvalidUserInput(GrantSearchError):
    """Rejected request input (e.g. empty search keyword). Raised before any upstream call."""


class ProfileNotFound(GrantSearchError):
    """No organization profile matches the requested id or email."""


class UpstreamError(GrantSearchError):
    """Failure talking to one upstream source.

    `message` is user-facing and scoped to the source; `kind` lets the
    caller distinguish rate limiting from outages.
    """

    kind = "upstream_error"
    transient = False

    def __init__(self, source: str, message: str, status_code: Optional[int] = None):
        super().__init__(f"[{source}] {message}")
        self.source = source
        self.message = message
        self.status_code = status_code


class UpstreamUnavailable(UpstreamError):
    """Timeout, 5xx or network failure."""

    kind = "unavailable"

    def __init__(
        self,
        source: str,
        message: str,
        status_code: Optional[int] = None,
        transient: bool = True,
    ):
        super().__init__(source, message, status_code)
        self.transient = transient


class UpstreamRateLimited(UpstreamError):
    """HTTP 429 from the source. Not retried; the user should try again shortly."""

    kind = "rate_limited"


class UpstreamRequestError(UpstreamError):
    """Non-transient 4xx client error."""

    kind = "request_error"


class MissingConfiguration(UpstreamError):
    """Source requires an API key that is not configured."""

    kind = "missing_configuration"
