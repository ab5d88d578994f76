"""Starline exception classes."""


class StarlineError(Exception):
    """Base exception for all Starline errors."""

    def __init__(self, code: str, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(f"[{code}] {message}")


class ConfigurationError(StarlineError):
    """Raised when configuration is invalid or missing."""

    def __init__(self, message: str) -> None:
        super().__init__("CONFIGURATION_ERROR", message)


class PaginationLimitReached(StarlineError):
    """Raised when the API refuses to page any further (HTTP 422).

    This is a terminal condition, not a failure: the fetcher stops and keeps
    what it already collected.
    """

    def __init__(self, url: str) -> None:
        super().__init__(
            "PAGINATION_LIMIT",
            f"GitHub API hit pagination limit, stopping (url: {url})",
        )
        self.url = url


class RemoteFailure(StarlineError):
    """Raised when a page request fails for any reason other than the pagination limit."""

    def __init__(self, url: str, status: int | None, body: str = "") -> None:
        if status is None:
            message = f"GitHub API error: GET {url} -> connection failed"
        else:
            message = f"GitHub API error: GET {url} -> {status}"
        if body:
            message = f"{message}, response:\n{body}"
        super().__init__("REMOTE_FAILURE", message)
        self.url = url
        self.status = status
        self.body = body


class MalformedTimestamp(StarlineError):
    """Raised when a starred_at value is not a valid ISO-8601 instant."""

    def __init__(self, value: object) -> None:
        super().__init__("MALFORMED_TIMESTAMP", f"Invalid date string: {value!r}")
        self.value = value


class InvalidGranularityError(StarlineError):
    """Raised on an unknown bucket granularity."""

    def __init__(self, value: object) -> None:
        super().__init__(
            "INVALID_GRANULARITY",
            f"Invalid granularity: {value!r}. Must be 'day', 'week' or 'month'",
        )
        self.value = value


class InvalidRepositoryError(StarlineError):
    """Raised when a repository identifier is not in owner/name form."""

    def __init__(self, value: object) -> None:
        super().__init__(
            "INVALID_REPOSITORY",
            f"Invalid repository: {value!r}. Expected 'owner/name'",
        )
        self.value = value


class CacheError(StarlineError):
    """Raised by cache backends when the store is corrupt or unreachable."""

    def __init__(self, message: str) -> None:
        super().__init__("CACHE_ERROR", message)
