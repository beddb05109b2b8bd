from __future__ import annotations

from dataclasses import asdict
from typing import Any


def _normalize(obj: Any) -> Any:
    if hasattr(obj, "value"):
        return obj.value
    if isinstance(obj, dict):
        return {str(k): _normalize(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_normalize(v) for v in obj]
    return obj


def to_json_safe_dict(obj: Any) -> dict[str, Any]:
    """
    Convert a dataclass object into a JSON safe dict.

    Enums become their values and tuples become lists.
    """
    raw = asdict(obj)
    normalized = _normalize(raw)
    if not isinstance(normalized, dict):
        raise TypeError("expected dict after normalization")
    return normalized


def topology_to_json(topology: Any) -> dict[str, Any]:
    """
    Topology transport shape.

    The connection string is added in its rendered form so the output can be
    compared directly with the ndbmtd command line.
    """
    data = to_json_safe_dict(topology)
    data["connect_string"] = topology.connect_string
    return data
