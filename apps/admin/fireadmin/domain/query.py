"""Query modifiers and their REST encoding."""

from __future__ import annotations

import json
from dataclasses import dataclass, replace
from typing import Any

from fireadmin.domain.paths import normalize_path
from fireadmin.errors import InvalidArgumentError

ORDER_BY_KEY = "$key"
ORDER_BY_PRIORITY = "$priority"
ORDER_BY_VALUE = "$value"
_RESERVED_ORDER_BY = frozenset({ORDER_BY_KEY, ORDER_BY_PRIORITY, ORDER_BY_VALUE})


def _encode(value: Any) -> str:
    try:
        return json.dumps(value, separators=(",", ":"), sort_keys=True)
    except (TypeError, ValueError) as exc:
        raise InvalidArgumentError(f"query value is not JSON-serializable: {value!r}") from exc


def _check_limit(limit: Any) -> int:
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 0:
        raise InvalidArgumentError("Limit must be a non-negative integer.")
    return limit


@dataclass(frozen=True, slots=True)
class QuerySpec:
    """Accumulated query modifiers.

    Every ``with_*`` method returns a new instance; an unset modifier is
    ``None`` and is omitted from the compiled parameters.
    """

    order_by: str | None = None
    start_at: Any = None
    end_at: Any = None
    equal_to: Any = None
    limit_to_first: int | None = None
    limit_to_last: int | None = None

    def with_order_by_child(self, path: str) -> QuerySpec:
        if not path or not isinstance(path, str):
            raise InvalidArgumentError("order_by_child path must be a non-empty string")
        if path in _RESERVED_ORDER_BY:
            raise InvalidArgumentError(f"Illegal child path: {path}")
        if path.startswith("/"):
            raise InvalidArgumentError(f'Invalid path argument: "{path}". Child path must not start with "/"')
        return replace(self, order_by=normalize_path(path))

    def with_order_by(self, sentinel: str) -> QuerySpec:
        if sentinel not in _RESERVED_ORDER_BY:
            raise InvalidArgumentError(f"Unknown ordering: {sentinel}")
        return replace(self, order_by=sentinel)

    def with_start_at(self, value: Any) -> QuerySpec:
        return replace(self, start_at=value)

    def with_end_at(self, value: Any) -> QuerySpec:
        return replace(self, end_at=value)

    def with_equal_to(self, value: Any) -> QuerySpec:
        return replace(self, equal_to=value)

    def with_limit_to_first(self, limit: int) -> QuerySpec:
        if self.limit_to_last is not None:
            raise InvalidArgumentError("Cannot set both first and last limits.")
        return replace(self, limit_to_first=_check_limit(limit))

    def with_limit_to_last(self, limit: int) -> QuerySpec:
        if self.limit_to_first is not None:
            raise InvalidArgumentError("Cannot set both first and last limits.")
        return replace(self, limit_to_last=_check_limit(limit))

    @property
    def is_empty(self) -> bool:
        return not self.to_params()

    def to_params(self) -> dict[str, str]:
        """Compile to REST query parameters.

        ``orderBy``/``startAt``/``endAt``/``equalTo`` are JSON-encoded so that
        strings arrive quoted and numbers bare; limits are plain integers.
        """
        params: dict[str, str] = {}
        if self.order_by is not None:
            params["orderBy"] = _encode(self.order_by)
        if self.start_at is not None:
            params["startAt"] = _encode(self.start_at)
        if self.end_at is not None:
            params["endAt"] = _encode(self.end_at)
        if self.equal_to is not None:
            params["equalTo"] = _encode(self.equal_to)
        if self.limit_to_first is not None:
            params["limitToFirst"] = str(self.limit_to_first)
        if self.limit_to_last is not None:
            params["limitToLast"] = str(self.limit_to_last)
        return params
