"""Immutable captures of database reads."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, TypeVar, overload

from pydantic import TypeAdapter

if TYPE_CHECKING:
    from fireadmin.services.database import Reference

_T = TypeVar("_T")

_JSON_NULL = b"null"


class DataSnapshot:
    """Raw response bytes of a read, decoded only on demand."""

    __slots__ = ("_ref", "_raw")

    def __init__(self, ref: Reference, raw: bytes) -> None:
        self._ref = ref
        self._raw = bytes(raw)

    @property
    def ref(self) -> Reference:
        return self._ref

    @property
    def key(self) -> str | None:
        return self._ref.key

    def exists(self) -> bool:
        return self._raw != _JSON_NULL

    @overload
    def val(self) -> Any: ...

    @overload
    def val(self, target: type[_T]) -> _T: ...

    def val(self, target: Any = None) -> Any:
        """Decode the payload, into ``target``'s shape when one is given.

        ``target`` may be a pydantic model or any type ``TypeAdapter``
        understands. Validation is strict, so a shape or type mismatch such as
        a string stored under an int field raises ``pydantic.ValidationError``.
        """
        if target is None:
            return json.loads(self._raw)
        return TypeAdapter(target).validate_json(self._raw, strict=True)

    def bytes(self) -> bytes:
        return self._raw

    def __repr__(self) -> str:
        return f"DataSnapshot(ref={self._ref!r}, size={len(self._raw)})"
