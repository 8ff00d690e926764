"""
RDAP Lookup

Resolves a domain to its TLD's authoritative RDAP server, queries it and
returns one normalized registration record.
"""

__version__ = "0.1.0"


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    import sys

    args = sys.argv[1:] if argv is None else argv

    # Handle CLI arguments before importing heavy dependencies
    if "--help" in args or "-h" in args:
        print_help()
        return 0

    if "--version" in args or "-V" in args:
        print(f"rdap-lookup {__version__}")
        return 0

    if "--serve" in args:
        from .server import mcp
        mcp.run()
        return 0

    positional = [a for a in args if not a.startswith("-")]
    unknown = [a for a in args if a.startswith("-")]
    if unknown or len(positional) != 1:
        print("Usage: rdap-lookup DOMAIN_OR_URL  (see --help)", file=sys.stderr)
        return 2

    return run_lookup(positional[0])


def run_lookup(value: str) -> int:
    """Look up one domain and print the record as JSON."""
    import asyncio
    import json
    import sys

    from .config import configure_logging
    from .errors import RdapLookupError
    from .lookup import lookup_domain

    configure_logging()

    try:
        record = asyncio.run(lookup_domain(value))
    except RdapLookupError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(json.dumps(record.to_dict(), indent=2, ensure_ascii=False))
    return 0


def print_help():
    """Print help message."""
    print(f"""rdap-lookup {__version__}

Look up domain registration data via RDAP.

Usage:
    rdap-lookup DOMAIN_OR_URL    Print the normalized RDAP record as JSON
    rdap-lookup --serve          Run the MCP server (stdio)
    rdap-lookup --version        Show version
    rdap-lookup --help           Show this help

Examples:
    rdap-lookup eib.org
    rdap-lookup https://www.example.com/about

Configuration (environment variables or ~/.config/rdap-lookup/config.json):
    RDAP_LOOKUP_MAX_REDIRECTS     Redirect/referral hop limit (default 5)
    RDAP_LOOKUP_FOLLOW_REFERRALS  Follow in-body "related" links (default true)
    RDAP_LOOKUP_TIMEOUT           Request timeout in seconds (default: httpx default)
    RDAP_LOOKUP_USER_AGENT        User-Agent header
    RDAP_LOOKUP_BOOTSTRAP         Path to an alternative bootstrap dns.json
    RDAP_LOOKUP_DEBUG             Set to 1 for debug logging
""")
