"""Realtime Database references, queries and REST reads/writes."""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Mapping

from pydantic_core import PydanticSerializationError, to_json

from fireadmin.adapters.http import HttpTransport, raise_for_status
from fireadmin.core.logging_safety import safe_log_identifier
from fireadmin.domain.paths import join_path, normalize_path, parent_path, path_key
from fireadmin.domain.query import ORDER_BY_KEY, ORDER_BY_PRIORITY, ORDER_BY_VALUE, QuerySpec
from fireadmin.errors import FeatureNotImplementedError, InvalidArgumentError, TransportError
from fireadmin.services.snapshots import DataSnapshot

logger = logging.getLogger(__name__)

_JSON_HEADERS = {"Content-Type": "application/json; charset=utf-8"}


class ServerValue:
    """Placeholders resolved by the database server at write time."""

    TIMESTAMP: Mapping[str, str] = {".sv": "timestamp"}


def _encode_value(value: Any) -> bytes:
    try:
        return to_json(value)
    except PydanticSerializationError as exc:
        raise InvalidArgumentError(f"value is not JSON-serializable: {exc}") from exc


class DatabaseReader:
    """Terminal REST operations against one database instance."""

    def __init__(self, transport: HttpTransport, *, base_url: str, timeout: float | None = None) -> None:
        self._transport = transport
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    @property
    def base_url(self) -> str:
        return self._base_url

    def url_for(self, path: str) -> str:
        return f"{self._base_url}/{path}.json"

    def _params(self, extra: Mapping[str, str] | None = None) -> dict[str, str]:
        params = dict(extra or {})
        if self._transport.bearer_in_url:
            token = self._transport.access_token()
            if token:
                params["access_token"] = token
        return params

    def _send(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, str] | None = None,
        value: Any = None,
        has_body: bool = False,
    ) -> bytes:
        response = self._transport.request(
            method,
            self.url_for(path),
            params=self._params(params),
            data=_encode_value(value) if has_body else None,
            headers=_JSON_HEADERS if has_body else None,
            timeout=self._timeout,
        )
        try:
            raise_for_status(response, service="database")
        except TransportError as exc:
            logger.warning(
                "database.request_failed method=%s path=%s status=%s",
                method,
                safe_log_identifier(path, prefix="path"),
                exc.status_code,
            )
            raise
        return response.body

    def get(self, path: str, params: Mapping[str, str] | None = None) -> bytes:
        return self._send("GET", path, params=params)

    def put(self, path: str, value: Any) -> None:
        self._send("PUT", path, value=value, has_body=True)

    def patch(self, path: str, value: Mapping[str, Any]) -> None:
        self._send("PATCH", path, value=value, has_body=True)

    def post(self, path: str, value: Any) -> str:
        """Append a child and return the server-generated key."""
        body = self._send("POST", path, value=value, has_body=True)
        try:
            name = _decode_object(body).get("name")
        except ValueError as exc:
            raise TransportError(f"database: malformed push response: {exc}", code="MALFORMED_RESPONSE") from exc
        if not isinstance(name, str) or not name:
            raise TransportError("database: push response has no generated key", code="MALFORMED_RESPONSE")
        return name

    def delete(self, path: str) -> None:
        self._send("DELETE", path)


def _decode_object(body: bytes) -> dict[str, Any]:
    decoded = json.loads(body)
    if not isinstance(decoded, dict):
        raise ValueError("expected a JSON object")
    return decoded


class Database:
    """Handle for one Realtime Database instance."""

    def __init__(self, transport: HttpTransport, *, url: str, timeout: float | None = None) -> None:
        if not url:
            raise InvalidArgumentError("database url is required")
        self._reader = DatabaseReader(transport, base_url=url, timeout=timeout)

    @property
    def url(self) -> str:
        return self._reader.base_url

    @property
    def reader(self) -> DatabaseReader:
        return self._reader

    def ref(self, path: str = "") -> Reference:
        return Reference(self, path)

    def go_online(self) -> None:
        raise FeatureNotImplementedError("go_online")

    def go_offline(self) -> None:
        raise FeatureNotImplementedError("go_offline")


class Reference:
    """Immutable pointer to a database location plus accumulated query modifiers.

    Navigation and query methods always return a new ``Reference``; the
    receiver is never changed. Terminal operations (reads and writes) are
    delegated to the owning database's ``DatabaseReader``.
    """

    __slots__ = ("_database", "_path", "_query")

    def __init__(self, database: Database, path: str = "", query: QuerySpec | None = None) -> None:
        self._database = database
        self._path = normalize_path(path)
        self._query = query or QuerySpec()

    @classmethod
    def _derive(cls, database: Database, path: str, query: QuerySpec | None = None) -> Reference:
        ref = cls.__new__(cls)
        ref._database = database
        ref._path = path
        ref._query = query or QuerySpec()
        return ref

    # Location

    @property
    def database(self) -> Database:
        return self._database

    @property
    def path(self) -> str:
        return self._path

    @property
    def key(self) -> str | None:
        return path_key(self._path)

    @property
    def query(self) -> QuerySpec:
        return self._query

    @property
    def url(self) -> str:
        return self._database.reader.url_for(self._path)

    def child(self, path: str) -> Reference:
        if not path or not isinstance(path, str):
            raise InvalidArgumentError(f'Invalid path argument: "{path}". Path must be a non-empty string.')
        return self._derive(self._database, join_path(self._path, path))

    def parent(self) -> Reference | None:
        parent = parent_path(self._path)
        if parent is None:
            return None
        return self._derive(self._database, parent)

    def root(self) -> Reference:
        return self._derive(self._database, "")

    # Query builder

    def _with(self, query: QuerySpec) -> Reference:
        return self._derive(self._database, self._path, query)

    def order_by_child(self, path: str) -> Reference:
        return self._with(self._query.with_order_by_child(path))

    def order_by_key(self) -> Reference:
        return self._with(self._query.with_order_by(ORDER_BY_KEY))

    def order_by_priority(self) -> Reference:
        return self._with(self._query.with_order_by(ORDER_BY_PRIORITY))

    def order_by_value(self) -> Reference:
        return self._with(self._query.with_order_by(ORDER_BY_VALUE))

    def start_at(self, value: Any) -> Reference:
        return self._with(self._query.with_start_at(value))

    def end_at(self, value: Any) -> Reference:
        return self._with(self._query.with_end_at(value))

    def equal_to(self, value: Any) -> Reference:
        return self._with(self._query.with_equal_to(value))

    def limit_to_first(self, limit: int) -> Reference:
        return self._with(self._query.with_limit_to_first(limit))

    def limit_to_last(self, limit: int) -> Reference:
        return self._with(self._query.with_limit_to_last(limit))

    def is_equal(self, other: object) -> bool:
        if not isinstance(other, Reference):
            return False
        return (
            self._database is other._database
            and self._path == other._path
            and self._query.to_params() == other._query.to_params()
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Reference):
            return NotImplemented
        return self.is_equal(other)

    def __hash__(self) -> int:
        return hash((id(self._database), self._path, tuple(sorted(self._query.to_params().items()))))

    def __str__(self) -> str:
        if not self._path:
            return self._database.url
        return f"{self._database.url}/{self._path}"

    def __repr__(self) -> str:
        return f"Reference(path={self._path!r}, query={self._query.to_params()!r})"

    # Terminal operations

    def once_value(self) -> DataSnapshot:
        raw = self._database.reader.get(self._path, self._query.to_params())
        return DataSnapshot(self, raw)

    def is_null(self) -> bool:
        """Shallow read answering whether nothing is stored at this location."""
        raw = self._database.reader.get(self._path, {"shallow": "true"})
        return raw.strip() == b"null"

    def set(self, value: Any) -> None:
        self._database.reader.put(self._path, value)

    def update(self, value: Mapping[str, Any]) -> None:
        if not value or not isinstance(value, Mapping):
            raise InvalidArgumentError("Value argument must be a non-empty mapping.")
        self._database.reader.patch(self._path, value)

    def push(self, value: Any = "") -> Reference:
        name = self._database.reader.post(self._path, value)
        logger.debug("database.pushed path=%s", safe_log_identifier(self._path, prefix="path"))
        return self.child(name)

    def remove(self) -> None:
        self._database.reader.delete(self._path)

    # Realtime listeners

    def on_value(self, callback: Callable[[DataSnapshot], None]) -> Callable[[], None]:
        raise FeatureNotImplementedError("on_value")

    def on_child_added(self, callback: Callable[[DataSnapshot, str | None], None]) -> Callable[[], None]:
        raise FeatureNotImplementedError("on_child_added")

    def on_child_removed(self, callback: Callable[[DataSnapshot], None]) -> Callable[[], None]:
        raise FeatureNotImplementedError("on_child_removed")

    def on_child_changed(self, callback: Callable[[DataSnapshot, str | None], None]) -> Callable[[], None]:
        raise FeatureNotImplementedError("on_child_changed")

    def on_child_moved(self, callback: Callable[[DataSnapshot, str | None], None]) -> Callable[[], None]:
        raise FeatureNotImplementedError("on_child_moved")

    def once_child_added(self) -> DataSnapshot:
        raise FeatureNotImplementedError("once_child_added")

    def once_child_removed(self) -> DataSnapshot:
        raise FeatureNotImplementedError("once_child_removed")

    def once_child_changed(self) -> DataSnapshot:
        raise FeatureNotImplementedError("once_child_changed")

    def once_child_moved(self) -> DataSnapshot:
        raise FeatureNotImplementedError("once_child_moved")
