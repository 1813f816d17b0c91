"""Ordered, validated parameter maps for a step's ``with:`` block."""

import copy
import datetime
from collections.abc import Iterator, Mapping, MutableMapping
from typing import Any

from pydantic import BaseModel

from ..exceptions import PatchStructureError

# Leaf types yaml.safe_load produces; datetime.datetime is a date subclass
_SCALARS = (str, int, float, bool, bytes, datetime.date, type(None))


def _check_value(key: str, value: Any) -> Any:
    """Validate a value recursively and return a detached copy of it."""
    if isinstance(value, _SCALARS):
        return value
    if isinstance(value, (list, tuple)):
        return [_check_value(f"{key}[{i}]", item) for i, item in enumerate(value)]
    if isinstance(value, Mapping):
        nested = {}
        for sub_key, sub_value in value.items():
            if not isinstance(sub_key, str):
                raise PatchStructureError(
                    f"Non-string key {sub_key!r} under '{key}'"
                )
            nested[sub_key] = _check_value(f"{key}.{sub_key}", sub_value)
        return nested
    raise PatchStructureError(
        f"Unsupported value for '{key}': {type(value).__name__}"
    )


class ParameterMap(MutableMapping[str, Any]):
    """Field name -> value map preserving insertion order.

    Keys must be strings; values must be YAML scalars (including dates),
    sequences or nested mappings of the same. Values are copied on the way
    in so a map never shares state with its source.
    """

    def __init__(self, items: Mapping[str, Any] | None = None):
        self._data: dict[str, Any] = {}
        if items:
            for key, value in items.items():
                self[key] = value

    @classmethod
    def from_raw(cls, raw: Any) -> "ParameterMap":
        """Build a map from a ``with:`` block as parsed from YAML.

        ``None`` becomes an empty map; pydantic models are dumped first.

        Raises:
            PatchStructureError: If ``raw`` is not a string-keyed mapping of
                supported values
        """
        if raw is None:
            return cls()
        if isinstance(raw, ParameterMap):
            return raw.copy()
        if isinstance(raw, BaseModel):
            raw = raw.model_dump()
        if not isinstance(raw, Mapping):
            raise PatchStructureError(
                f"Parameters must be a mapping, got {type(raw).__name__}"
            )
        return cls(raw)

    def __setitem__(self, key: str, value: Any) -> None:
        if not isinstance(key, str):
            raise PatchStructureError(f"Parameter names must be strings: {key!r}")
        self._data[key] = _check_value(key, value)

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __delitem__(self, key: str) -> None:
        del self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ParameterMap):
            return self._data == other._data
        if isinstance(other, Mapping):
            return self._data == dict(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"ParameterMap({self._data!r})"

    def copy(self) -> "ParameterMap":
        clone = ParameterMap()
        clone._data = copy.deepcopy(self._data)
        return clone

    def rename(self, old: str, new: str) -> None:
        """Rename a key in place, keeping its position."""
        self._data = {
            (new if key == old else key): value for key, value in self._data.items()
        }

    def to_dict(self) -> dict[str, Any]:
        """Return a plain, deep-copied dict (for YAML/JSON output)."""
        return copy.deepcopy(self._data)
