"""Place descriptor: the ``.orc/config.json`` file tying a directory to a catalog id."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

DESCRIPTOR_VERSION = "1.0"
CONTROL_DIR = ".orc"
DESCRIPTOR_NAME = "config.json"


@dataclass(frozen=True)
class PlaceDescriptor:
    place_id: str
    version: str = DESCRIPTOR_VERSION

    def to_json(self) -> str:
        return json.dumps({"version": self.version, "place_id": self.place_id}, indent=2)

    @classmethod
    def from_json(cls, text: str) -> PlaceDescriptor:
        """Parse a descriptor. Raises ValueError on malformed content."""
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError("descriptor must be a JSON object")
        return cls(
            place_id=str(data.get("place_id", "") or ""),
            version=str(data.get("version", DESCRIPTOR_VERSION)),
        )

    @classmethod
    def read(cls, path: Path) -> PlaceDescriptor:
        return cls.from_json(path.read_text())


def control_dir(place_dir: Path) -> Path:
    return place_dir / CONTROL_DIR


def descriptor_path(place_dir: Path) -> Path:
    return place_dir / CONTROL_DIR / DESCRIPTOR_NAME
