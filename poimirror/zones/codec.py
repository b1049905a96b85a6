"""JSON import/export for zone lists — pure functions, no state."""

import json
from typing import Iterable

from poimirror.zones.models import MalformedImportError, Zone, ZoneValidationError


def dump_zones(zones: Iterable[Zone]) -> str:
    """Serialise *zones* to pretty-printed JSON (2-space indent)."""
    return json.dumps([z.to_dict() for z in zones], indent=2)


def parse_zones(text: str) -> list[Zone]:
    """Decode a JSON array of zone objects.

    The whole document is validated before anything is returned, so a
    caller that only replaces its state on success never applies a partial
    import.

    Raises:
        MalformedImportError: on a JSON syntax error, a non-array top-level
            value, or any element that fails zone validation.
    """
    try:
        data = json.loads(text)
    except (TypeError, json.JSONDecodeError) as exc:
        raise MalformedImportError(f"Invalid JSON format: {exc}") from exc

    if not isinstance(data, list):
        raise MalformedImportError("Invalid POI array format")

    zones: list[Zone] = []
    for i, item in enumerate(data):
        try:
            zones.append(Zone.from_dict(item))
        except ZoneValidationError as exc:
            raise MalformedImportError(f"Zone #{i}: {exc}") from exc
    return zones
