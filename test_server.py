"""
Tests for the MCP server tools.

Lookups are replaced with fakes so no network access happens.
"""

import json

import pytest

from rdap_lookup import server
from rdap_lookup.errors import DomainNotFoundError, UnsupportedTldError
from rdap_lookup.normalizer import normalize


@pytest.fixture
def fake_lookups(monkeypatch, eib_rdap):
    async def fake_lookup_domain(value):
        if value.endswith(".doesnotexist"):
            raise UnsupportedTldError("doesnotexist", domain=value)
        return normalize(value, eib_rdap)

    async def fake_lookup_domains(values):
        results = []
        for value in values:
            if value.startswith("missing"):
                results.append(DomainNotFoundError(f"Domain {value} not found", domain=value))
            else:
                results.append(normalize(value, eib_rdap))
        return results

    monkeypatch.setattr(server, "_lookup_domain", fake_lookup_domain)
    monkeypatch.setattr(server, "_lookup_domains", fake_lookup_domains)


def test_server_name():
    assert server.mcp.name == "rdap-lookup"


@pytest.mark.anyio
async def test_lookup_domain_tool(fake_lookups):
    data = json.loads(await server.lookup_domain("eib.org"))

    assert data["domainName"] == "eib.org"
    assert data["registrar"]["name"] == "MarkMonitor Inc."
    assert "raw" not in data


@pytest.mark.anyio
async def test_lookup_domain_tool_with_raw(fake_lookups, eib_rdap):
    data = json.loads(await server.lookup_domain("eib.org", includeRaw=True))
    assert data["raw"] == eib_rdap


@pytest.mark.anyio
async def test_lookup_domain_tool_error(fake_lookups):
    data = json.loads(await server.lookup_domain("example.doesnotexist"))

    assert data["errorType"] == "tld_unsupported"
    assert data["domain"] == "example.doesnotexist"
    assert "bootstrap" in data["error"]


@pytest.mark.anyio
async def test_lookup_domains_tool(fake_lookups):
    data = json.loads(await server.lookup_domains(["eib.org", "missing.org"]))

    results = data["results"]
    assert [r.get("domainName") for r in results] == ["eib.org", None]
    assert results[1] == {
        "domain": "missing.org",
        "error": "Domain missing.org not found",
        "errorType": "not_found",
    }


@pytest.mark.anyio
async def test_lookup_domains_tool_empty(fake_lookups):
    data = json.loads(await server.lookup_domains([]))
    assert "error" in data


def test_supported_tlds_tool():
    data = json.loads(server.supported_tlds())

    assert "com" in data["tlds"]
    assert data["count"] == len(data["tlds"])
    assert data["tlds"] == sorted(data["tlds"])
