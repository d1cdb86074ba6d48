import math
from typing import Any, Callable, Dict, Optional

from world_store import BlockType

from .registry import register_packet, _registry


class MalformedPacket(ValueError):
    """Raised when a message is not a JSON object or fails field validation."""


class BasePacket:
    packet_type: str = None
    # field name -> converter; a converter raises MalformedPacket on bad input
    fields: Dict[str, Callable[[Any], Any]] = {}

    def __init__(self, **kwargs):
        self._data = dict(kwargs)

    @classmethod
    def from_data(cls, data: Dict[str, Any]):
        values = {}
        for name, convert in cls.fields.items():
            if name not in data:
                raise MalformedPacket(f"{cls.packet_type}: missing field '{name}'")
            values[name] = convert(data[name])
        return cls(**values)

    def to_data(self) -> Dict[str, Any]:
        return dict(self._data)

    def to_message(self) -> Dict[str, Any]:
        message = {"type": self.packet_type}
        message.update(self._data)
        return message

    def __getattr__(self, item):
        # fallback to data keys for convenience
        if item in self._data:
            return self._data[item]
        raise AttributeError(item)


def coordinate(value) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedPacket(f"coordinate must be an integer, got {value!r}")
    if isinstance(value, float):
        if not value.is_integer():
            raise MalformedPacket(f"coordinate must be an integer, got {value!r}")
        return int(value)
    return value


def number(value) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedPacket(f"expected a number, got {value!r}")
    if not math.isfinite(value):
        raise MalformedPacket(f"expected a finite number, got {value!r}")
    return float(value)


def block_type(value):
    try:
        return BlockType(value)
    except (TypeError, ValueError):
        raise MalformedPacket(f"unknown block type {value!r}") from None


def passthrough(value):
    return value


def mapping(value) -> dict:
    if not isinstance(value, dict):
        raise MalformedPacket(f"expected an object, got {type(value).__name__}")
    return value


def sequence(value) -> list:
    if not isinstance(value, list):
        raise MalformedPacket(f"expected a list, got {type(value).__name__}")
    return value


def parse_raw_packet(raw: Dict[str, Any]) -> Optional[BasePacket]:
    """Parse a decoded message (a dict with a 'type' key) into a packet object.

    Returns None for an empty message. Unknown kinds come back as a plain
    BasePacket carrying '_raw_type' so the caller can log and drop them.
    """
    if not raw:
        return None
    if not isinstance(raw, dict):
        raise MalformedPacket(f"message must be an object, got {type(raw).__name__}")
    kind = raw.get("type")
    data = {k: v for k, v in raw.items() if k != "type"}
    cls = _registry.get(kind)
    if cls:
        return cls.from_data(data)
    p = BasePacket(**data)
    p._data["_raw_type"] = kind
    return p


__all__ = [
    "BasePacket",
    "MalformedPacket",
    "parse_raw_packet",
    "register_packet",
    "coordinate",
    "number",
    "block_type",
    "passthrough",
    "mapping",
    "sequence",
]

# Import concrete packet modules so they register themselves on package import
from . import player as player_packets  # noqa: F401,E402
from . import block as block_packets  # noqa: F401,E402
