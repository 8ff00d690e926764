"""
RDAP Bootstrap Registry

Loads the packaged snapshot of IANA's RDAP bootstrap file and answers
"which RDAP servers are authoritative for this TLD?".

The snapshot is read once per process and never refreshed in place;
regenerating it is the job of update_bootstrap.py.
"""

import json
import logging
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType

from .config import load_settings
from .errors import BootstrapLoadError, UnsupportedTldError

logger = logging.getLogger(__name__)

# Packaged snapshot location
BOOTSTRAP_DATA_PATH = Path(__file__).parent / "data" / "dns.json"


def parse_bootstrap_services(data: dict) -> dict[str, tuple[str, ...]]:
    """
    Flatten the "services" array of an RFC 9224 bootstrap document.

    Each service is a pair of lists, TLD labels then base URLs, e.g.
    [["ch", "li"], ["https://rdap.nic.ch/"]]. Every label maps to the
    URL tuple in document order. Pairs that are not shaped like that are
    skipped, and a label listed twice keeps its first service.
    """
    services = {}
    entries = data.get("services", []) if isinstance(data, dict) else []
    if not isinstance(entries, list):
        return services

    for entry in entries:
        if not isinstance(entry, list) or len(entry) < 2:
            continue
        tlds, urls = entry[0], entry[1]
        if not isinstance(tlds, list) or not isinstance(urls, list):
            continue
        urls = tuple(u for u in urls if isinstance(u, str) and u)
        if not urls:
            continue
        for tld in tlds:
            if not isinstance(tld, str) or not tld.strip(". "):
                continue
            services.setdefault(tld.strip(". ").lower(), urls)
    return services


class BootstrapRegistry:
    """
    Read-only TLD -> RDAP base URL mapping.

    Usage:
        registry = load_bootstrap()
        servers = registry.lookup_servers("org")
    """

    def __init__(
        self,
        services: dict[str, tuple[str, ...]],
        version: str | None = None,
        publication: str | None = None,
    ) -> None:
        normalized = {tld.lower(): tuple(urls) for tld, urls in services.items()}
        self._services = MappingProxyType(normalized)
        self.version = version
        self.publication = publication

    @classmethod
    def from_data(cls, data: dict) -> "BootstrapRegistry":
        """Build a registry from a decoded IANA bootstrap document."""
        return cls(
            parse_bootstrap_services(data),
            version=data.get("version"),
            publication=data.get("publication"),
        )

    def __contains__(self, tld: object) -> bool:
        return isinstance(tld, str) and tld.lower() in self._services

    def __len__(self) -> int:
        return len(self._services)

    def __repr__(self) -> str:
        return (
            f"BootstrapRegistry({len(self)} TLDs, "
            f"publication={self.publication!r})"
        )

    def get_servers(self, tld: str) -> tuple[str, ...]:
        """Return the server URLs for a TLD, or () if unknown."""
        return self._services.get(tld.lower(), ())

    def lookup_servers(self, tld: str) -> tuple[str, ...]:
        """
        Get the RDAP base URLs for a TLD, in preference order.

        Args:
            tld: The top-level domain (without leading dot), e.g. "com", "io"

        Raises:
            UnsupportedTldError: If the TLD is not in the bootstrap.
        """
        servers = self.get_servers(tld)
        if not servers:
            raise UnsupportedTldError(tld.lower())
        return servers

    def supported_tlds(self) -> list[str]:
        """Get all TLDs in the registry, sorted alphabetically."""
        return sorted(self._services)


def load_bootstrap(path: Path | str | None = None) -> BootstrapRegistry:
    """
    Load a bootstrap registry from a snapshot file.

    Args:
        path: Snapshot to read (defaults to the packaged data/dns.json)

    Raises:
        BootstrapLoadError: If the file is missing, unreadable, not JSON,
            or contains no usable services.
    """
    path = Path(path) if path is not None else BOOTSTRAP_DATA_PATH

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise BootstrapLoadError(f"Cannot read RDAP bootstrap {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise BootstrapLoadError(f"Corrupt RDAP bootstrap {path}: {e}") from e

    if not isinstance(data, dict):
        raise BootstrapLoadError(f"Corrupt RDAP bootstrap {path}: not a JSON object")

    registry = BootstrapRegistry.from_data(data)
    if not len(registry):
        raise BootstrapLoadError(f"RDAP bootstrap {path} has no services")

    logger.debug(
        "Loaded RDAP bootstrap %s: %d TLDs (publication %s)",
        path, len(registry), registry.publication,
    )
    return registry


@lru_cache(maxsize=1)
def get_default_registry() -> BootstrapRegistry:
    """
    Load the process-wide registry once.

    Honors RDAP_LOOKUP_BOOTSTRAP / bootstrap_path from the settings.
    """
    return load_bootstrap(load_settings().bootstrap_path)
