"""
RDAP Lookup MCP Server

Exposes RDAP domain lookups as MCP tools:
- lookup_domain: one domain or URL -> normalized registration record
- lookup_domains: many domains in parallel, results in input order
- supported_tlds: TLDs present in the bootstrap snapshot
"""

import json

from mcp.server.fastmcp import FastMCP

from . import __version__
from .config import configure_logging
from .errors import RdapLookupError
from .lookup import lookup_domain as _lookup_domain
from .lookup import lookup_domains as _lookup_domains
from .rdap_bootstrap import get_default_registry

configure_logging()

# Initialize the MCP server
mcp = FastMCP("rdap-lookup")
mcp._mcp_server.version = __version__


def _error_payload(error: RdapLookupError, value: str) -> dict:
    payload = {
        "domain": error.domain or value,
        "error": str(error),
        "errorType": error.error_type,
    }
    return payload


def _record_payload(record, include_raw: bool) -> dict:
    data = record.to_dict()
    if not include_raw:
        data.pop("raw", None)
    return data


@mcp.tool()
async def lookup_domain(domain: str, includeRaw: bool = False) -> str:
    """
    Look up registration data for a domain via RDAP.

    Args:
        domain: Domain name or URL (e.g. "eib.org" or "https://www.eib.org/en")
        includeRaw: If true, include the registry's unmodified RDAP JSON as "raw"

    Returns:
        JSON with domainName, createdAt, updatedAt, expiresAt, registrar,
        registrant, nameservers and status, or {"error", "errorType"}.
    """
    try:
        record = await _lookup_domain(domain)
    except RdapLookupError as e:
        return json.dumps(_error_payload(e, domain))
    return json.dumps(_record_payload(record, includeRaw))


@mcp.tool()
async def lookup_domains(domains: list[str], includeRaw: bool = False) -> str:
    """
    Look up several domains in parallel.

    Args:
        domains: Domain names or URLs
        includeRaw: If true, include each registry's raw RDAP JSON

    Returns:
        JSON {"results": [...]} in the same order as the input; failed
        lookups appear as {"domain", "error", "errorType"} entries.
    """
    if not domains:
        return json.dumps({"error": "No domains provided"})

    outcomes = await _lookup_domains(domains)
    results = []
    for value, outcome in zip(domains, outcomes):
        if isinstance(outcome, RdapLookupError):
            results.append(_error_payload(outcome, value))
        else:
            results.append(_record_payload(outcome, includeRaw))
    return json.dumps({"results": results})


@mcp.tool()
def supported_tlds() -> str:
    """
    List the TLDs that have an RDAP server in the bootstrap snapshot.

    Returns:
        JSON with the sorted TLD list, its count and the snapshot publication date.
    """
    registry = get_default_registry()
    tlds = registry.supported_tlds()
    return json.dumps({
        "tlds": tlds,
        "count": len(tlds),
        "publication": registry.publication,
    })
