"""
Async RDAP Client

Queries RDAP servers for domain objects, following HTTP redirects and
in-body referrals up to a fixed number of hops, and classifies every
failure into one of the error types in rdap_lookup.errors.

No retries and no rate limiting are done here; both belong to the caller.
"""

import json
import logging
from urllib.parse import urljoin

import httpx

from .config import Settings
from .errors import (
    DomainNotFoundError,
    InvalidResponseError,
    NetworkOrServerError,
    QueryError,
    TooManyRedirectsError,
    UnsupportedTldError,
)

logger = logging.getLogger(__name__)

RDAP_MEDIA_TYPES = ("application/rdap+json", "application/json")

REDIRECT_CODES = {301, 302, 303, 307, 308}


def build_query_url(base_url: str, domain: str) -> str:
    """Build the RDAP domain query URL: {base}/domain/{domain}."""
    return f"{base_url.rstrip('/')}/domain/{domain}"


def _json_kind(value) -> str:
    """Describe a decoded JSON value for error messages."""
    if isinstance(value, list):
        return "array"
    if isinstance(value, str):
        return "string"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if value is None:
        return "null"
    return type(value).__name__


def find_referral(data: dict, current_url: str) -> str | None:
    """
    Find an in-body referral to another RDAP server.

    Looks for a link with rel="related" pointing at a domain object that
    is not the URL just queried, e.g. a thin registry referring to the
    registrar's RDAP service.
    """
    links = data.get("links")
    if not isinstance(links, list):
        return None

    for link in links:
        if not isinstance(link, dict):
            continue
        if str(link.get("rel", "")).lower() != "related":
            continue
        href = link.get("href")
        if not isinstance(href, str) or not href:
            continue
        link_type = str(link.get("type", "")).lower()
        if link_type and not link_type.startswith(RDAP_MEDIA_TYPES):
            continue
        target = urljoin(current_url, href)
        if "/domain/" not in target:
            continue
        if target.rstrip("/").lower() == current_url.rstrip("/").lower():
            continue
        return target
    return None


class AsyncRDAPClient:
    """
    Async RDAP client with connection pooling.

    Usage:
        async with AsyncRDAPClient() as client:
            raw = await client.query("example.com", registry.lookup_servers("com"))
    """

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings or Settings()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def settings(self) -> Settings:
        return self._settings

    async def __aenter__(self) -> "AsyncRDAPClient":
        kwargs = {}
        if self._settings.timeout is not None:
            kwargs["timeout"] = self._settings.timeout
        if self._transport is not None:
            kwargs["transport"] = self._transport

        self._client = httpx.AsyncClient(
            headers={
                "Accept": "application/rdap+json, application/json;q=0.9",
                "User-Agent": self._settings.user_agent,
            },
            # Redirects are followed by hand so hops can be counted
            follow_redirects=False,
            **kwargs,
        )
        return self

    async def __aexit__(self, *args) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _get(self, url: str, domain: str) -> httpx.Response:
        """Issue a single GET, mapping transport failures to NetworkOrServerError."""
        logger.debug("RDAP GET %s", url)
        try:
            return await self._client.get(url)
        except httpx.TimeoutException as e:
            raise NetworkOrServerError(
                f"Request to {url} timed out",
                domain=domain,
                url=url,
                error_type="timeout",
            ) from e
        except httpx.HTTPError as e:
            raise NetworkOrServerError(
                f"Network error querying {url}: {e}",
                domain=domain,
                url=url,
            ) from e

    def _decode(self, response: httpx.Response, domain: str, url: str) -> dict:
        """Decode a 200 body into a JSON object."""
        try:
            data = json.loads(response.content)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            content_type = response.headers.get("Content-Type", "unknown")
            raise InvalidResponseError(
                f"RDAP response from {url} is not valid JSON (Content-Type: {content_type})",
                domain=domain,
                url=url,
            ) from e

        if not isinstance(data, dict):
            raise InvalidResponseError(
                f"RDAP response from {url} is a JSON {_json_kind(data)}, expected an object",
                domain=domain,
                url=url,
            )
        return data

    async def query_server(self, domain: str, base_url: str) -> dict:
        """
        Query one RDAP server for a domain, following redirects/referrals.

        Once a referral has been followed, a failure further down the chain
        (404, server error, bad body) does not lose the data already
        received: the body that carried the referral is returned instead.

        Returns:
            The decoded RDAP JSON object of the final response

        Raises:
            DomainNotFoundError, TooManyRedirectsError,
            InvalidResponseError, NetworkOrServerError
        """
        if self._client is None:
            raise RuntimeError("Client not initialized. Use 'async with' context.")

        max_redirects = self._settings.max_redirects
        url = build_query_url(base_url, domain)
        visited = {url}
        hops = 0
        referrer: dict | None = None

        while True:
            try:
                response = await self._get(url, domain)
                status = response.status_code

                if status in REDIRECT_CODES:
                    location = response.headers.get("Location")
                    if not location:
                        raise NetworkOrServerError(
                            f"RDAP status {status} from {url} without Location header",
                            domain=domain,
                            url=url,
                            status_code=status,
                        )
                    hops += 1
                    if hops > max_redirects:
                        raise TooManyRedirectsError(max_redirects, domain=domain, url=url)
                    next_url = urljoin(url, location)
                    logger.debug("Redirect %d/%d: %s -> %s", hops, max_redirects, url, next_url)
                    visited.add(next_url)
                    url = next_url
                    continue

                if status == 404:
                    raise DomainNotFoundError(
                        f"Domain {domain} not found ({url})", domain=domain, url=url
                    )

                if status != 200:
                    raise NetworkOrServerError(
                        f"RDAP status {status} from {url}",
                        domain=domain,
                        url=url,
                        status_code=status,
                    )

                data = self._decode(response, domain, url)
            except TooManyRedirectsError:
                raise
            except QueryError as e:
                if referrer is None:
                    raise
                logger.debug("Referral to %s failed for %s, keeping referring response: %s", url, domain, e)
                return referrer

            if self._settings.follow_referrals:
                referral = find_referral(data, url)
                if referral and referral not in visited:
                    hops += 1
                    if hops > max_redirects:
                        raise TooManyRedirectsError(max_redirects, domain=domain, url=url)
                    logger.debug("Referral %d/%d: %s -> %s", hops, max_redirects, url, referral)
                    visited.add(referral)
                    referrer = data
                    url = referral
                    continue

            return data

    async def query(self, domain: str, servers) -> dict:
        """
        Query the candidate servers in order until one answers.

        A 404 is authoritative and ends the search. Any other failure moves
        on to the next server; if all fail, the last error is raised.

        Args:
            domain: Normalized domain name
            servers: RDAP base URLs in preference order

        Raises:
            UnsupportedTldError: If servers is empty
            QueryError: The 404 or the last server's failure
        """
        servers = list(servers)
        if not servers:
            raise UnsupportedTldError(domain.rsplit(".", 1)[-1], domain=domain)

        last_error: QueryError | None = None
        for base_url in servers:
            try:
                return await self.query_server(domain, base_url)
            except DomainNotFoundError:
                raise
            except QueryError as e:
                logger.debug("RDAP server %s failed for %s: %s", base_url, domain, e)
                last_error = e

        raise last_error
