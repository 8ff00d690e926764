"""
Domain extraction.

Turns user input (a bare domain or a full URL) into a normalized ASCII
domain name plus the TLD used for the bootstrap lookup.
"""

import ipaddress
import re
from dataclasses import dataclass
from urllib.parse import urlsplit

from .errors import InvalidInputError

_LABEL_RE = re.compile(r"^(?!-)[a-z0-9-]{1,63}(?<!-)$")
_SCHEME_RE = re.compile(r"^[a-z][a-z0-9+.-]*://", re.IGNORECASE)


@dataclass(frozen=True)
class ParsedDomain:
    """A normalized domain name and the TLD it belongs to."""

    domain: str
    tld: str


def _host_from_input(value: str) -> str:
    """Pull the host out of a URL, or the leading part of a bare value."""
    if _SCHEME_RE.match(value) or value.startswith("//"):
        try:
            host = urlsplit(value if not value.startswith("//") else "http:" + value).hostname
        except ValueError:
            host = None
        return host or ""

    # Bare value - drop any path, query or fragment, then userinfo/port
    host = re.split(r"[/?#]", value, maxsplit=1)[0]
    host = host.rsplit("@", 1)[-1]
    if host.count(":") == 1:
        host = host.split(":", 1)[0]
    return host


def _to_ascii(host: str, original: str) -> str:
    if host.isascii():
        return host
    try:
        return host.encode("idna").decode("ascii")
    except UnicodeError as e:
        raise InvalidInputError(f"Invalid internationalized domain: {original!r}") from e


def _is_ip_literal(host: str) -> bool:
    try:
        ipaddress.ip_address(host.strip("[]"))
        return True
    except ValueError:
        return False


def _match_tld(domain: str, known_tlds) -> str:
    """
    Pick the TLD for a domain.

    Registry keys win over the naive last-label split, so a dotted key such
    as "co.uk" is used when present. At least one label must remain in
    front of the chosen suffix.
    """
    labels = domain.split(".")
    if known_tlds is not None:
        for i in range(1, len(labels)):
            candidate = ".".join(labels[i:])
            if candidate in known_tlds:
                return candidate
    return labels[-1]


def extract_domain(value: str, registry=None) -> ParsedDomain:
    """
    Normalize a domain or URL for an RDAP lookup.

    Args:
        value: "example.com", "https://www.example.com/path", ...
        registry: Optional BootstrapRegistry (or any container of TLD
                  strings) used to match dotted TLD keys

    Returns:
        ParsedDomain with a lowercase ASCII domain and its TLD

    Raises:
        InvalidInputError: If no domain with a TLD can be extracted.
    """
    if not isinstance(value, str) or not value.strip():
        raise InvalidInputError("No domain provided", domain=None)

    original = value
    host = _host_from_input(value.strip())
    host = host.strip().rstrip(".").lower()

    if not host:
        raise InvalidInputError(f"No host found in {original!r}")
    if _is_ip_literal(host):
        raise InvalidInputError(f"IP addresses are not domain names: {original!r}")

    host = _to_ascii(host, original)

    # www. is not significant for lookups, unless it is the whole name
    if host.startswith("www.") and "." in host[4:]:
        host = host[4:]

    labels = host.split(".")
    if len(labels) < 2:
        raise InvalidInputError(f"No TLD found in {original!r}", domain=host)
    for label in labels:
        if not _LABEL_RE.match(label):
            raise InvalidInputError(f"Invalid domain name: {original!r}", domain=host)

    return ParsedDomain(domain=host, tld=_match_tld(host, registry))
