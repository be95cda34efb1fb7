"""In-memory data handles exchanged with containerised tools."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

#: Property recording the file an item was read from.
INPUT_LOCATION = "io.reader.inputlocation"
#: Display name assigned by tool recipes.
NAME = "name"


@dataclass(eq=False)
class DataItem:
    """A payload plus a free-form string property map.

    The payload is whatever the active codec understands (a nibabel image,
    raw bytes …).  Items compare by identity, matching the handle semantics
    of the objects they wrap.
    """

    payload: Any
    properties: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_file(cls, payload: Any, path: str | Path) -> "DataItem":
        """Return an item whose provenance points at *path*."""
        return cls(payload, {INPUT_LOCATION: str(path)})


def input_location(item: DataItem) -> str | None:
    """Return the recorded source file of *item* or ``None``."""
    value = item.properties.get(INPUT_LOCATION)
    return value or None


def clear_input_location(item: DataItem) -> str | None:
    """Remove and return the recorded source file of *item*."""
    return item.properties.pop(INPUT_LOCATION, None) or None
