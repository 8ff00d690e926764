"""
RDAP response normalizer.

Maps the heterogeneous RDAP JSON that registries return (RFC 9083 domain
objects with events, entities, vCard arrays, nameservers and status
tokens) onto one stable StandardizedRecord. Extraction is best effort:
missing or garbled fields produce absent values, never exceptions.
"""

import copy
import re
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

# eventAction -> record field
EVENT_FIELDS = {
    "registration": "created_at",
    "last changed": "updated_at",
    "last update of rdap database": "updated_at",
    "expiration": "expires_at",
}

IANA_REGISTRAR_ID_TYPE = "iana registrar id"

# Placeholders registries put in redacted contact fields
_REDACTED_MARKERS = ("redacted", "not disclosed", "withheld", "data protected")

_CAMEL_RE = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")
_FRACTION_RE = re.compile(r"\.(\d+)")
_OFFSET_RE = re.compile(r"([+-]\d{2}):?(\d{2})?$")


@dataclass
class Registrar:
    name: str | None = None
    iana_id: str | None = None
    url: str | None = None

    def to_dict(self) -> dict:
        return _compact({"name": self.name, "ianaId": self.iana_id, "url": self.url})


@dataclass
class Registrant:
    name: str | None = None
    organization: str | None = None
    email: str | None = None

    def to_dict(self) -> dict:
        return _compact({
            "name": self.name,
            "organization": self.organization,
            "email": self.email,
        })


@dataclass
class StandardizedRecord:
    """Normalized RDAP domain record. Optional fields are None when absent."""

    domain_name: str
    created_at: str | None = None
    updated_at: str | None = None
    expires_at: str | None = None
    registrar: Registrar | None = None
    registrant: Registrant | None = None
    nameservers: list[str] = field(default_factory=list)
    status: list[str] = field(default_factory=list)
    raw: dict = field(default_factory=dict, repr=False)

    def to_dict(self) -> dict:
        """Public JSON shape: camelCase keys, absent fields omitted."""
        result = {"domainName": self.domain_name}
        for key, value in (
            ("createdAt", self.created_at),
            ("updatedAt", self.updated_at),
            ("expiresAt", self.expires_at),
        ):
            if value is not None:
                result[key] = value
        if self.registrar is not None:
            result["registrar"] = self.registrar.to_dict()
        if self.registrant is not None:
            result["registrant"] = self.registrant.to_dict()
        result["nameservers"] = list(self.nameservers)
        result["status"] = list(self.status)
        result["raw"] = self.raw
        return result


def _compact(values: dict) -> dict:
    return {k: v for k, v in values.items() if v is not None}


def _clean_text(value: Any) -> str | None:
    """Collapse whitespace; None for empty or non-text values."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        value = str(value)
    if not isinstance(value, str):
        return None
    text = " ".join(value.split())
    return text or None


def _is_redacted(text: str) -> bool:
    lowered = text.lower()
    return any(marker in lowered for marker in _REDACTED_MARKERS)


def _fraction6(match: re.Match) -> str:
    return "." + match.group(1)[:6].ljust(6, "0")


def _offset_hhmm(match: re.Match) -> str:
    return f"{match.group(1)}:{match.group(2) or '00'}"


def parse_rdap_datetime(value: Any) -> str | None:
    """
    Normalize an RDAP date to ISO 8601 UTC ("2020-01-02T03:04:05Z").

    Naive timestamps are taken as UTC. Fractions of any length and
    "+0200" / "+02" offsets are accepted. Returns None if unparseable.
    """
    text = _clean_text(value)
    if not text:
        return None
    if text[-1] in "zZ":
        text = text[:-1] + "+00:00"
    date_part, sep, time_part = text.partition("T")
    if sep:
        # fromisoformat on 3.10 only takes 3 or 6 fraction digits and HH:MM offsets
        time_part = _FRACTION_RE.sub(_fraction6, time_part)
        time_part = _OFFSET_RE.sub(_offset_hhmm, time_part)
        text = date_part + sep + time_part
    try:
        dt = datetime.fromisoformat(text)
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def vcard_value(entity: dict, prop: str) -> str | None:
    """
    Get the first non-empty value of a vCard property from an entity.

    vcardArray layout: ["vcard", [[name, params, type, value], ...]].
    Structured values (e.g. org as a list) are joined with ", ".
    """
    vcard = entity.get("vcardArray")
    if not isinstance(vcard, list) or len(vcard) < 2:
        return None

    for item in _as_list(vcard[1]):
        if not isinstance(item, list) or len(item) < 4:
            continue
        if not isinstance(item[0], str) or item[0].lower() != prop:
            continue
        value = item[3]
        if isinstance(value, list):
            parts = [_clean_text(v) for v in value]
            text = ", ".join(p for p in parts if p)
        else:
            text = _clean_text(value)
        if text:
            return text
    return None


def iter_entities(raw: dict):
    """Yield entities breadth first: top-level ones, then nested ones."""
    queue = deque(e for e in _as_list(raw.get("entities")) if isinstance(e, dict))
    while queue:
        entity = queue.popleft()
        yield entity
        queue.extend(e for e in _as_list(entity.get("entities")) if isinstance(e, dict))


def find_entity(raw: dict, role: str) -> dict | None:
    """Find the first entity with the given role."""
    for entity in iter_entities(raw):
        roles = entity.get("roles")
        if isinstance(roles, str):
            roles = [roles]
        if any(isinstance(r, str) and r.lower() == role for r in _as_list(roles)):
            return entity
    return None


def extract_events(raw: dict) -> dict[str, str]:
    """Map events to created_at/updated_at/expires_at. First match wins."""
    dates = {}
    for event in _as_list(raw.get("events")):
        if not isinstance(event, dict):
            continue
        action = _clean_text(event.get("eventAction"))
        target = EVENT_FIELDS.get(action.lower()) if action else None
        if not target or target in dates:
            continue
        date = parse_rdap_datetime(event.get("eventDate"))
        if date:
            dates[target] = date
    return dates


def _iana_id(entity: dict) -> str | None:
    for public_id in _as_list(entity.get("publicIds")):
        if not isinstance(public_id, dict):
            continue
        id_type = _clean_text(public_id.get("type"))
        if id_type and id_type.lower() == IANA_REGISTRAR_ID_TYPE:
            identifier = _clean_text(public_id.get("identifier"))
            if identifier:
                return identifier
    return None


def _about_link(entity: dict) -> str | None:
    for link in _as_list(entity.get("links")):
        if isinstance(link, dict) and str(link.get("rel", "")).lower() == "about":
            href = _clean_text(link.get("href"))
            if href:
                return href
    return None


def extract_registrar(raw: dict) -> Registrar | None:
    entity = find_entity(raw, "registrar")
    if entity is None:
        return None

    registrar = Registrar(
        name=vcard_value(entity, "fn") or vcard_value(entity, "org") or _clean_text(entity.get("name")),
        iana_id=_iana_id(entity),
        url=vcard_value(entity, "url") or _clean_text(entity.get("url")) or _about_link(entity),
    )
    if registrar.name is None and registrar.iana_id is None and registrar.url is None:
        return None
    return registrar


def extract_registrant(raw: dict) -> Registrant | None:
    entity = find_entity(raw, "registrant")
    if entity is None:
        return None

    def visible(prop):
        value = vcard_value(entity, prop)
        return None if value is None or _is_redacted(value) else value

    email = visible("email")
    if email and email.lower().startswith("mailto:"):
        email = email[len("mailto:"):] or None

    registrant = Registrant(name=visible("fn"), organization=visible("org"), email=email)
    if registrant.name is None and registrant.organization is None and registrant.email is None:
        return None
    return registrant


def extract_nameservers(raw: dict) -> list[str]:
    """ldhName of each nameserver, lowercased, deduplicated in order."""
    names = []
    for ns in _as_list(raw.get("nameservers")):
        if isinstance(ns, dict):
            name = _clean_text(ns.get("ldhName")) or _clean_text(ns.get("unicodeName"))
        elif isinstance(ns, str):
            name = _clean_text(ns)
        else:
            continue
        if not name:
            continue
        name = name.rstrip(".").lower()
        if name and name not in names:
            names.append(name)
    return names


def status_phrase(token: str) -> str:
    """
    Normalize a status token into an RDAP phrase.

    "client  Transfer prohibited" -> "client transfer prohibited"
    "clientTransferProhibited"    -> "client transfer prohibited" (EPP style)
    """
    return " ".join(_CAMEL_RE.sub(" ", token).split()).lower()


def extract_status(raw: dict) -> list[str]:
    statuses = []
    for token in _as_list(raw.get("status")):
        if not isinstance(token, str):
            continue
        text = _clean_text(token)
        if not text:
            continue
        phrase = status_phrase(text)
        if phrase not in statuses:
            statuses.append(phrase)
    return statuses


def normalize(domain: str, raw: dict) -> StandardizedRecord:
    """
    Build a StandardizedRecord from a raw RDAP domain response.

    Pure: the same input always yields an equal record, and ``raw`` is
    attached as an unmodified deep copy.
    """
    if not isinstance(raw, dict):
        raw = {}

    events = extract_events(raw)
    return StandardizedRecord(
        domain_name=domain.strip().lower(),
        created_at=events.get("created_at"),
        updated_at=events.get("updated_at"),
        expires_at=events.get("expires_at"),
        registrar=extract_registrar(raw),
        registrant=extract_registrant(raw),
        nameservers=extract_nameservers(raw),
        status=extract_status(raw),
        raw=copy.deepcopy(raw),
    )
