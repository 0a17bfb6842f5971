"""
Document-store access: Firestore in production, an in-process store for
demo mode and tests.

Both implementations expose the same operations: point read, filtered
read, live subscription, single update, atomic batch update, delete,
add, and read-modify-write transactions. Documents are handed out as
plain dicts with the document id under the ``"id"`` key.

Filters are ``(field, op, value)`` tuples. The in-process store only
evaluates equality filters, which is all the dashboard issues.
"""

import copy
import functools
import logging
import os
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Iterable

import firebase_admin
from firebase_admin import credentials, firestore
from google.api_core import exceptions as google_exceptions

from .config import FIREBASE_CREDENTIALS, FIRESTORE_EMULATOR_HOST

logger = logging.getLogger(__name__)

Filter = tuple[str, str, Any]
SnapshotCallback = Callable[[list[dict]], None]


class StoreError(Exception):
    """A document-store call failed (network loss, permission denial, ...)."""


class DocumentNotFound(StoreError):
    """The addressed document does not exist."""


class Subscription:
    """Handle on a live listener. ``unsubscribe()`` may be called repeatedly."""

    def __init__(self, cancel: Callable[[], None]):
        self._cancel = cancel
        self.active = True

    def unsubscribe(self) -> None:
        if not self.active:
            return
        self.active = False
        self._cancel()


def _with_id(doc_id: str, data: dict | None) -> dict:
    doc = dict(data or {})
    doc["id"] = doc_id
    return doc


# ---------------------------------------------------------------------------
# Firestore
# ---------------------------------------------------------------------------
def connect(cred_path: str | None = None):
    """Return a Firestore client, initialising the default Firebase app once.

    Credentials come from ``cred_path``, then FIREBASE_CREDENTIALS /
    GOOGLE_APPLICATION_CREDENTIALS, then ``serviceAccountKey.json`` in the
    project root. With FIRESTORE_EMULATOR_HOST set, no credentials are needed.
    """
    try:
        firebase_admin.get_app()
    except ValueError:
        path = cred_path or FIREBASE_CREDENTIALS
        if os.path.exists(path):
            firebase_admin.initialize_app(credentials.Certificate(path))
        elif FIRESTORE_EMULATOR_HOST:
            firebase_admin.initialize_app()
        else:
            raise StoreError(
                "Firebase credentials not found. Set FIREBASE_CREDENTIALS or "
                "GOOGLE_APPLICATION_CREDENTIALS to a service account key, or "
                "place serviceAccountKey.json in the project root."
            )
        logger.info("Firebase app initialised")
    return firestore.client()


def _wrap_google_errors(func):
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except google_exceptions.NotFound as exc:
            raise DocumentNotFound(str(exc)) from exc
        except google_exceptions.GoogleAPIError as exc:
            raise StoreError(str(exc)) from exc
    return wrapper


class _FirestoreTransaction:
    def __init__(self, client, transaction):
        self._client = client
        self._transaction = transaction

    def get(self, collection: str, doc_id: str) -> dict | None:
        snap = self._client.collection(collection).document(doc_id).get(
            transaction=self._transaction
        )
        if not snap.exists:
            return None
        return _with_id(snap.id, snap.to_dict())

    def update(self, collection: str, doc_id: str, fields: dict) -> None:
        self._transaction.update(self._client.collection(collection).document(doc_id), fields)

    def add(self, collection: str, data: dict) -> str:
        ref = self._client.collection(collection).document()
        self._transaction.set(ref, data)
        return ref.id


class FirestoreStore:
    """Store backed by a ``firebase_admin`` Firestore client."""

    def __init__(self, client=None):
        self._client = client if client is not None else connect()

    def _query(self, collection: str, filters: Iterable[Filter] = ()):
        query = self._client.collection(collection)
        for field, op, value in filters:
            query = query.where(field, op, value)
        return query

    def server_timestamp(self):
        return firestore.SERVER_TIMESTAMP

    @_wrap_google_errors
    def get(self, collection: str, doc_id: str) -> dict | None:
        snap = self._client.collection(collection).document(doc_id).get()
        if not snap.exists:
            return None
        return _with_id(snap.id, snap.to_dict())

    @_wrap_google_errors
    def list(
        self,
        collection: str,
        filters: Iterable[Filter] = (),
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[dict]:
        query = self._query(collection, filters)
        if order_by:
            direction = firestore.Query.DESCENDING if descending else firestore.Query.ASCENDING
            query = query.order_by(order_by, direction=direction)
        return [_with_id(snap.id, snap.to_dict()) for snap in query.stream()]

    @_wrap_google_errors
    def subscribe(
        self,
        collection: str,
        filters: Iterable[Filter],
        callback: SnapshotCallback,
    ) -> Subscription:
        def on_snapshot(snapshots, changes, read_time):
            callback([_with_id(snap.id, snap.to_dict()) for snap in snapshots])

        watch = self._query(collection, filters).on_snapshot(on_snapshot)
        return Subscription(watch.unsubscribe)

    @_wrap_google_errors
    def add(self, collection: str, data: dict) -> str:
        _, ref = self._client.collection(collection).add(data)
        return ref.id

    @_wrap_google_errors
    def update(self, collection: str, doc_id: str, fields: dict) -> None:
        self._client.collection(collection).document(doc_id).update(fields)

    @_wrap_google_errors
    def batch_update(self, collection: str, updates: Iterable[tuple[str, dict]]) -> None:
        batch = self._client.batch()
        for doc_id, fields in updates:
            batch.update(self._client.collection(collection).document(doc_id), fields)
        batch.commit()

    @_wrap_google_errors
    def delete(self, collection: str, doc_id: str) -> None:
        self._client.collection(collection).document(doc_id).delete()

    @_wrap_google_errors
    def run_transaction(self, fn: Callable[[Any], Any]) -> Any:
        transaction = self._client.transaction()

        @firestore.transactional
        def _run(transaction):
            return fn(_FirestoreTransaction(self._client, transaction))

        return _run(transaction)


# ---------------------------------------------------------------------------
# In-process store
# ---------------------------------------------------------------------------
class _MemoryTransaction:
    def __init__(self, store: "MemoryStore"):
        self._store = store
        self.writes: list[tuple[str, str, str, dict]] = []

    def get(self, collection: str, doc_id: str) -> dict | None:
        return self._store.get(collection, doc_id)

    def update(self, collection: str, doc_id: str, fields: dict) -> None:
        self.writes.append(("update", collection, doc_id, fields))

    def add(self, collection: str, data: dict) -> str:
        doc_id = uuid.uuid4().hex[:20]
        self.writes.append(("set", collection, doc_id, data))
        return doc_id


class MemoryStore:
    """In-process document store with Firestore-like semantics.

    Listeners get the full matching set once on subscription and again
    after every committed write to their collection, on the writer's
    thread. Batches and transactions apply all of their writes or none.
    """

    def __init__(self):
        self._collections: dict[str, dict[str, dict]] = {}
        self._listeners: dict[int, tuple[str, list[Filter], SnapshotCallback]] = {}
        self._next_listener = 0
        self._lock = threading.RLock()

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def server_timestamp(self) -> datetime:
        return datetime.now(timezone.utc)

    def _docs(self, collection: str) -> dict[str, dict]:
        return self._collections.setdefault(collection, {})

    def _matching(self, collection: str, filters: Iterable[Filter]) -> list[dict]:
        filters = list(filters)
        for _, op, _ in filters:
            if op != "==":
                raise ValueError(f"Unsupported filter operator: {op!r}")
        with self._lock:
            return [
                _with_id(doc_id, copy.deepcopy(data))
                for doc_id, data in self._docs(collection).items()
                if all(data.get(field) == value for field, _, value in filters)
            ]

    def _notify(self, collection: str) -> None:
        with self._lock:
            listeners = [
                (filters, callback)
                for coll, filters, callback in self._listeners.values()
                if coll == collection
            ]
        for filters, callback in listeners:
            try:
                callback(self._matching(collection, filters))
            except Exception:
                logger.exception("Snapshot listener on '%s' failed", collection)

    def get(self, collection: str, doc_id: str) -> dict | None:
        with self._lock:
            data = self._docs(collection).get(doc_id)
            if data is None:
                return None
            return _with_id(doc_id, copy.deepcopy(data))

    def list(
        self,
        collection: str,
        filters: Iterable[Filter] = (),
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[dict]:
        docs = self._matching(collection, filters)
        if order_by:
            # Firestore leaves out documents that lack the ordering field
            docs = [doc for doc in docs if doc.get(order_by) is not None]
            docs.sort(key=lambda doc: doc[order_by], reverse=descending)
        return docs

    def subscribe(
        self,
        collection: str,
        filters: Iterable[Filter],
        callback: SnapshotCallback,
    ) -> Subscription:
        filters = list(filters)
        with self._lock:
            key = self._next_listener
            self._next_listener += 1
            self._listeners[key] = (collection, filters, callback)
        callback(self._matching(collection, filters))
        return Subscription(lambda: self._listeners.pop(key, None))

    def add(self, collection: str, data: dict, doc_id: str | None = None) -> str:
        doc_id = doc_id or uuid.uuid4().hex[:20]
        with self._lock:
            self._docs(collection)[doc_id] = copy.deepcopy(data)
        self._notify(collection)
        return doc_id

    def update(self, collection: str, doc_id: str, fields: dict) -> None:
        self.batch_update(collection, [(doc_id, fields)])

    def batch_update(self, collection: str, updates: Iterable[tuple[str, dict]]) -> None:
        updates = list(updates)
        with self._lock:
            docs = self._docs(collection)
            missing = [doc_id for doc_id, _ in updates if doc_id not in docs]
            if missing:
                raise DocumentNotFound(f"No document to update in '{collection}': {missing}")
            for doc_id, fields in updates:
                docs[doc_id].update(copy.deepcopy(fields))
        self._notify(collection)

    def delete(self, collection: str, doc_id: str) -> None:
        with self._lock:
            self._docs(collection).pop(doc_id, None)
        self._notify(collection)

    def run_transaction(self, fn: Callable[[Any], Any]) -> Any:
        with self._lock:
            transaction = _MemoryTransaction(self)
            result = fn(transaction)
            for op, collection, doc_id, data in transaction.writes:
                if op == "update" and doc_id not in self._docs(collection):
                    raise DocumentNotFound(f"No document to update in '{collection}': {doc_id}")
            touched = []
            for op, collection, doc_id, data in transaction.writes:
                docs = self._docs(collection)
                if op == "update":
                    docs[doc_id].update(copy.deepcopy(data))
                else:
                    docs[doc_id] = copy.deepcopy(data)
                if collection not in touched:
                    touched.append(collection)
        for collection in touched:
            self._notify(collection)
        return result


def open_store(demo: bool = False):
    """Return a FirestoreStore, or an empty MemoryStore when ``demo`` is set."""
    if demo:
        logger.info("Using in-memory document store")
        return MemoryStore()
    return FirestoreStore()
