"""In-memory issue document store with live query subscriptions.

Stands in for the hosted document database: documents are plain dicts in the
persisted camelCase shape, ids and ``createdAt``/``updatedAt`` are assigned by
the store, every update touches exactly one document, and subscribers receive
a whole-result snapshot after each write that affects the collection.
"""

from __future__ import annotations

import copy
import logging
import operator
import threading
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any

from .errors import StoreError
from .timestamps import utc_now

logger = logging.getLogger(__name__)


class _ServerTimestamp:
    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"

    def __deepcopy__(self, memo):
        return self


SERVER_TIMESTAMP = _ServerTimestamp()

_OPERATORS: dict[str, Callable[[Any, Any], bool]] = {
    "==": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
}


@dataclass(frozen=True, slots=True)
class Query:
    filters: tuple[tuple[str, str, Any], ...] = ()
    order_by: str | None = None
    descending: bool = False
    limit: int | None = None

    def where(self, field_name: str, op: str, value: Any) -> Query:
        if op not in _OPERATORS:
            raise ValueError(f"Unsupported query operator: {op}")
        return replace(self, filters=(*self.filters, (field_name, op, value)))

    def ordered(self, field_name: str, *, descending: bool = False) -> Query:
        return replace(self, order_by=field_name, descending=descending)

    def limited(self, count: int) -> Query:
        return replace(self, limit=count)

    def matches(self, doc: dict[str, Any]) -> bool:
        for field_name, op, value in self.filters:
            current = doc.get(field_name)
            if current is None and op not in ("==", "!="):
                return False
            try:
                if not _OPERATORS[op](current, value):
                    return False
            except TypeError:
                return False
        return True

    def run(self, docs: list[dict[str, Any]]) -> list[dict[str, Any]]:
        out = [d for d in docs if self.matches(d)]
        if self.order_by:
            key = self.order_by
            present = [d for d in out if d.get(key) is not None]
            missing = [d for d in out if d.get(key) is None]
            present.sort(key=lambda d: d[key], reverse=self.descending)
            out = present + missing
        if self.limit is not None:
            out = out[: self.limit]
        return out


@dataclass(slots=True)
class Snapshot:
    docs: list[dict[str, Any]]
    changed_ids: list[str] = field(default_factory=list)


SnapshotCallback = Callable[[Snapshot], None]


class Subscription:
    def __init__(self, store: IssueStore, query: Query, callback: SnapshotCallback):
        self._store = store
        self.query = query
        self.callback = callback
        self.active = True

    def cancel(self) -> None:
        if self.active:
            self.active = False
            self._store._remove_subscription(self)


class IssueStore:
    """Single-collection document store.

    Parameters
    ----------
    clock : callable, optional
        Source of server timestamps. Defaults to the current UTC time.
    """

    def __init__(self, clock: Callable[[], datetime] | None = None):
        self._clock = clock or utc_now
        self._docs: dict[str, dict[str, Any]] = {}
        self._subscriptions: list[Subscription] = []
        self._lock = threading.RLock()

    # ------------------ Writes ------------------
    def add(self, data: dict[str, Any]) -> str:
        doc_id = uuid.uuid4().hex
        with self._lock:
            now = self._clock()
            doc = self._resolve_sentinels(dict(data), now)
            doc["createdAt"] = now
            doc["updatedAt"] = now
            doc["id"] = doc_id
            self._docs[doc_id] = copy.deepcopy(doc)
        logger.debug("Created issue document %s", doc_id)
        self._notify([doc_id])
        return doc_id

    def update(self, doc_id: str, fields: dict[str, Any]) -> None:
        """Merge ``fields`` into one document atomically; ``updatedAt`` is server-stamped."""
        if not doc_id:
            raise StoreError("Document id required for update")
        with self._lock:
            current = self._docs.get(doc_id)
            if current is None:
                raise StoreError(f"Issue {doc_id} not found")
            now = self._clock()
            merged = dict(current)
            merged.update(copy.deepcopy(self._resolve_sentinels(fields, now)))
            merged["updatedAt"] = now
            merged["id"] = doc_id
            self._docs[doc_id] = merged
        logger.debug("Updated issue document %s fields=%s", doc_id, sorted(fields))
        self._notify([doc_id])

    # ------------------ Reads ------------------
    def get(self, doc_id: str) -> dict[str, Any] | None:
        with self._lock:
            doc = self._docs.get(doc_id)
            return copy.deepcopy(doc) if doc is not None else None

    def query(self, query: Query | None = None) -> list[dict[str, Any]]:
        with self._lock:
            docs = list(self._docs.values())
            return copy.deepcopy((query or Query()).run(docs))

    # ------------------ Live queries ------------------
    def subscribe(self, query: Query, callback: SnapshotCallback) -> Subscription:
        """Register ``callback`` and deliver the current result set immediately."""
        sub = Subscription(self, query, callback)
        with self._lock:
            self._subscriptions.append(sub)
        self._deliver(sub, [])
        return sub

    def _remove_subscription(self, sub: Subscription) -> None:
        with self._lock:
            if sub in self._subscriptions:
                self._subscriptions.remove(sub)

    def _notify(self, changed_ids: list[str]) -> None:
        with self._lock:
            subs = list(self._subscriptions)
        for sub in subs:
            self._deliver(sub, changed_ids)

    def _deliver(self, sub: Subscription, changed_ids: list[str]) -> None:
        if not sub.active:
            return
        snapshot = Snapshot(docs=self.query(sub.query), changed_ids=list(changed_ids))
        try:
            sub.callback(snapshot)
        except Exception as exc:
            logger.warning("Snapshot listener failed: %s", exc)

    def _resolve_sentinels(self, data: dict[str, Any], now: datetime) -> dict[str, Any]:
        return {k: (now if v is SERVER_TIMESTAMP else v) for k, v in data.items()}
