"""
orochi/core/models.py
Entity snapshot shared by the cache, the AniList source and the formatters.
The core only ever reads `kind` and `id`; `data` is the raw AniList payload.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping


class EntityKind(str, Enum):
    ANIME     = "anime"
    MANGA     = "manga"
    CHARACTER = "character"
    USER      = "user"


def _freeze(value: Any) -> Any:
    if isinstance(value, Mapping):
        return MappingProxyType({k: _freeze(v) for k, v in value.items()})
    if isinstance(value, list):
        return tuple(_freeze(v) for v in value)
    return value


@dataclass(frozen=True)
class Entity:
    kind: EntityKind
    id:   int
    data: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_payload(cls, kind: EntityKind, payload: Mapping[str, Any]) -> "Entity":
        """Build an immutable snapshot from a decoded AniList JSON object."""
        return cls(kind=kind, id=int(payload["id"]), data=_freeze(payload))

    def __getitem__(self, key: str) -> Any:
        return self.data[key]

    def get(self, key: str, default: Any = None) -> Any:
        value = self.data.get(key)
        return default if value is None else value
