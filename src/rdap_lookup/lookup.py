"""
Domain lookup entry points.

lookup_domain() runs the full pipeline for one input:
    extract_domain -> BootstrapRegistry.lookup_servers -> AsyncRDAPClient.query -> normalize

lookup_domains() fans the same pipeline out over many inputs.
"""

import asyncio
import logging

from .config import Settings, load_settings
from .domain import extract_domain
from .errors import RdapLookupError
from .normalizer import StandardizedRecord, normalize
from .rdap_bootstrap import BootstrapRegistry, get_default_registry
from .rdap_client import AsyncRDAPClient

logger = logging.getLogger(__name__)


def _resolve(value: str, registry: BootstrapRegistry):
    """Extract the domain and find its servers; no network access."""
    parsed = extract_domain(value, registry)
    try:
        servers = registry.lookup_servers(parsed.tld)
    except RdapLookupError as e:
        e.domain = parsed.domain
        raise
    return parsed, servers


async def _lookup_with_client(
    value: str, registry: BootstrapRegistry, client: AsyncRDAPClient
) -> StandardizedRecord:
    parsed, servers = _resolve(value, registry)
    logger.debug("Looking up %s via %s", parsed.domain, ", ".join(servers))
    raw = await client.query(parsed.domain, servers)
    return normalize(parsed.domain, raw)


async def lookup_domain(
    value: str,
    *,
    registry: BootstrapRegistry | None = None,
    client: AsyncRDAPClient | None = None,
    settings: Settings | None = None,
) -> StandardizedRecord:
    """
    Look up a domain (or URL) via RDAP and return the normalized record.

    Input and TLD problems are raised before any network request is made.

    Args:
        value: "example.com" or "https://www.example.com/page"
        registry: Bootstrap registry (defaults to the packaged snapshot)
        client: An open AsyncRDAPClient to reuse; a new one is created if None
        settings: Settings for a newly created client (defaults to load_settings())

    Raises:
        InvalidInputError, UnsupportedTldError, DomainNotFoundError,
        TooManyRedirectsError, InvalidResponseError, NetworkOrServerError
    """
    if registry is None:
        registry = get_default_registry()

    if client is not None:
        return await _lookup_with_client(value, registry, client)

    # Validate before opening a connection pool
    _resolve(value, registry)

    async with AsyncRDAPClient(settings or load_settings()) as new_client:
        return await _lookup_with_client(value, registry, new_client)


async def lookup_domains(
    values: list[str],
    *,
    registry: BootstrapRegistry | None = None,
    client: AsyncRDAPClient | None = None,
    settings: Settings | None = None,
    fail_fast: bool = False,
) -> list[StandardizedRecord | RdapLookupError]:
    """
    Look up many domains concurrently, preserving input order.

    By default every lookup runs to completion and failed slots hold the
    RdapLookupError for that input. With fail_fast=True the first error is
    raised and the other lookups are cancelled.
    """
    if not values:
        return []
    if registry is None:
        registry = get_default_registry()

    async def run(rdap_client: AsyncRDAPClient):
        tasks = [
            asyncio.ensure_future(_lookup_with_client(v, registry, rdap_client))
            for v in values
        ]
        if fail_fast:
            try:
                return list(await asyncio.gather(*tasks))
            except BaseException:
                for task in tasks:
                    task.cancel()
                await asyncio.gather(*tasks, return_exceptions=True)
                raise

        results = await asyncio.gather(*tasks, return_exceptions=True)
        for result in results:
            if isinstance(result, BaseException) and not isinstance(result, RdapLookupError):
                raise result
        return list(results)

    if client is not None:
        return await run(client)

    async with AsyncRDAPClient(settings or load_settings()) as new_client:
        return await run(new_client)
