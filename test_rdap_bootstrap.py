"""
Tests for the RDAP bootstrap registry.
"""

import json

import pytest

from rdap_lookup.errors import BootstrapLoadError, RdapLookupError, UnsupportedTldError
from rdap_lookup.rdap_bootstrap import (
    BOOTSTRAP_DATA_PATH,
    BootstrapRegistry,
    get_default_registry,
    load_bootstrap,
    parse_bootstrap_services,
)


class TestParseBootstrapServices:
    """Tests for parse_bootstrap_services."""

    def test_maps_every_tld_to_its_urls(self):
        data = {
            "services": [
                [["com", "net"], ["https://rdap.verisign.com/com/v1/"]],
                [["org"], ["https://a.example/", "https://b.example/"]],
            ]
        }
        services = parse_bootstrap_services(data)

        assert services["com"] == ("https://rdap.verisign.com/com/v1/",)
        assert services["net"] == ("https://rdap.verisign.com/com/v1/",)
        assert services["org"] == ("https://a.example/", "https://b.example/")

    def test_lowercases_keys(self):
        services = parse_bootstrap_services({"services": [[["ORG"], ["https://x/"]]]})
        assert list(services) == ["org"]

    def test_skips_malformed_entries(self):
        data = {
            "services": [
                [["a"]],
                [["b"], []],
                "garbage",
                [["c"], ["https://c.example/"]],
            ]
        }
        assert parse_bootstrap_services(data) == {"c": ("https://c.example/",)}

    def test_first_service_wins_for_duplicate_tld(self):
        data = {
            "services": [
                [["io"], ["https://first/"]],
                [["io"], ["https://second/"]],
            ]
        }
        assert parse_bootstrap_services(data)["io"] == ("https://first/",)

    def test_missing_services(self):
        assert parse_bootstrap_services({}) == {}


class TestBootstrapRegistry:
    """Tests for BootstrapRegistry lookups."""

    def test_lookup_is_case_insensitive(self, registry):
        assert registry.lookup_servers("ORG") == ("https://rdap.org.test/rdap/",)

    def test_lookup_preserves_order(self, registry):
        assert registry.lookup_servers("com") == (
            "https://primary.test/com/v1/",
            "https://backup.test/com/v1/",
        )

    def test_unsupported_tld(self, registry):
        with pytest.raises(UnsupportedTldError) as exc_info:
            registry.lookup_servers("doesnotexist")

        assert exc_info.value.tld == "doesnotexist"
        assert "bootstrap" in str(exc_info.value).lower()
        assert exc_info.value.error_type == "tld_unsupported"

    def test_contains_and_len(self, registry):
        assert "Org" in registry
        assert "doesnotexist" not in registry
        assert 123 not in registry
        assert len(registry) == 3

    def test_supported_tlds_sorted(self, registry):
        assert registry.supported_tlds() == ["co.uk", "com", "org"]

    def test_is_read_only(self, registry):
        with pytest.raises(TypeError):
            registry._services["new"] = ("https://x/",)


class TestLoadBootstrap:
    """Tests for loading snapshot files."""

    def test_packaged_snapshot(self):
        registry = load_bootstrap()

        assert BOOTSTRAP_DATA_PATH.exists()
        assert registry.version == "1.0"
        assert registry.publication
        assert len(registry) > 1000
        for tld in ("com", "net", "org", "dev", "io", "nl", "blog", "art",
                    "design", "be", "pl", "ch", "xn--p1ai"):
            servers = registry.lookup_servers(tld)
            assert servers
            assert all(url.startswith("https://") for url in servers)

    def test_every_supported_tld_has_servers(self):
        registry = load_bootstrap()
        for tld in registry.supported_tlds():
            assert len(registry.lookup_servers(tld)) > 0

    def test_custom_path(self, tmp_path):
        path = tmp_path / "dns.json"
        path.write_text(json.dumps({
            "version": "1.0",
            "publication": "2026-01-01T00:00:00Z",
            "services": [[["test"], ["https://rdap.test/"]]],
        }))

        registry = load_bootstrap(path)

        assert registry.lookup_servers("test") == ("https://rdap.test/",)
        assert registry.publication == "2026-01-01T00:00:00Z"

    def test_missing_file(self, tmp_path):
        with pytest.raises(BootstrapLoadError):
            load_bootstrap(tmp_path / "missing.json")

    def test_corrupt_file(self, tmp_path):
        path = tmp_path / "dns.json"
        path.write_text("{not json")

        with pytest.raises(BootstrapLoadError, match="Corrupt"):
            load_bootstrap(path)

    def test_no_services(self, tmp_path):
        path = tmp_path / "dns.json"
        path.write_text(json.dumps({"services": []}))

        with pytest.raises(BootstrapLoadError, match="no services"):
            load_bootstrap(path)

    def test_load_error_is_not_a_lookup_error(self):
        assert issubclass(BootstrapLoadError, RdapLookupError)
        assert not issubclass(BootstrapLoadError, UnsupportedTldError)


def test_default_registry_loaded_once():
    assert get_default_registry() is get_default_registry()
    assert isinstance(get_default_registry(), BootstrapRegistry)
