from typing import Dict, Type

# wire "type" string -> packet class
_registry: Dict[str, Type] = {}


def register_packet(cls: Type):
    kind = getattr(cls, "packet_type", None)
    if kind is None:
        raise ValueError("packet class must define packet_type")
    existing = _registry.get(kind)
    if existing is not None and existing is not cls:
        raise ValueError(f"packet type '{kind}' already registered by {existing.__name__}")
    _registry[kind] = cls
    return cls
