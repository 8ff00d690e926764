"""
Error types for RDAP lookups.

Every failure reaches the caller as a distinct exception class so that
"unsupported TLD", "not found" and "server trouble" can be told apart.
Each class carries a short ``error_type`` string used when errors are
reported as JSON (MCP server, CLI).
"""


class RdapLookupError(Exception):
    """Base class for all errors raised by this package."""

    error_type = "error"

    def __init__(self, message: str, domain: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.domain = domain

    def __str__(self) -> str:
        return self.message


class ConfigError(RdapLookupError):
    """A configuration value could not be parsed."""

    error_type = "config"


class BootstrapLoadError(RdapLookupError):
    """The bootstrap snapshot is missing or corrupt (fatal at startup)."""

    error_type = "bootstrap"


class InvalidInputError(RdapLookupError):
    """The input has no extractable domain name or TLD."""

    error_type = "invalid_input"


class UnsupportedTldError(RdapLookupError):
    """The TLD has no entry in the bootstrap registry."""

    error_type = "tld_unsupported"

    def __init__(self, tld: str, domain: str | None = None) -> None:
        super().__init__(f"TLD .{tld} not in RDAP bootstrap", domain=domain)
        self.tld = tld


class QueryError(RdapLookupError):
    """Base class for failures while talking to an RDAP server."""

    def __init__(
        self, message: str, domain: str | None = None, url: str | None = None
    ) -> None:
        super().__init__(message, domain=domain)
        self.url = url


class DomainNotFoundError(QueryError):
    """The authoritative server answered 404 for the domain."""

    error_type = "not_found"


class TooManyRedirectsError(QueryError):
    """The redirect/referral chain exceeded the hop limit."""

    error_type = "too_many_redirects"

    def __init__(
        self,
        max_redirects: int,
        domain: str | None = None,
        url: str | None = None,
    ) -> None:
        super().__init__(
            f"Exceeded {max_redirects} redirects while querying {url}",
            domain=domain,
            url=url,
        )
        self.max_redirects = max_redirects


class InvalidResponseError(QueryError):
    """A 200 response whose body is not an RDAP JSON object."""

    error_type = "invalid_response"


class NetworkOrServerError(QueryError):
    """Transport failure or a non-404 error status from the server.

    ``status_code`` is None when no HTTP response was received; the
    underlying exception, if any, is chained as ``__cause__``.
    """

    def __init__(
        self,
        message: str,
        domain: str | None = None,
        url: str | None = None,
        status_code: int | None = None,
        error_type: str | None = None,
    ) -> None:
        super().__init__(message, domain=domain, url=url)
        self.status_code = status_code
        if error_type:
            self.error_type = error_type
        elif status_code is not None:
            self.error_type = "http_error"
        else:
            self.error_type = "network"
