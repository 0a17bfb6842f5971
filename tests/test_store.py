from unittest import mock

import pytest
from google.api_core import exceptions as google_exceptions

from almacen_dashboard.store import (
    DocumentNotFound,
    FirestoreStore,
    StoreError,
)


def test_get_and_list(store):
    a = store.add("items", {"nombre": "A", "tipo": "MATERIAL"})
    store.add("items", {"nombre": "B", "tipo": "MINERAL"})

    assert store.get("items", a) == {"id": a, "nombre": "A", "tipo": "MATERIAL"}
    assert store.get("items", "missing") is None
    assert [d["nombre"] for d in store.list("items", filters=[("tipo", "==", "MINERAL")])] == ["B"]


def test_list_order_by_skips_documents_without_field(store):
    store.add("items", {"nombre": "B", "orden": 2})
    store.add("items", {"nombre": "A", "orden": 1})
    store.add("items", {"nombre": "sin orden"})

    docs = store.list("items", order_by="orden", descending=True)
    assert [d["nombre"] for d in docs] == ["B", "A"]


def test_only_equality_filters_supported(store):
    with pytest.raises(ValueError):
        store.list("items", filters=[("stock", "<", 3)])


def test_returned_documents_are_copies(store):
    doc_id = store.add("items", {"tags": ["a"]})
    doc = store.get("items", doc_id)
    doc["tags"].append("b")
    assert store.get("items", doc_id)["tags"] == ["a"]


def test_subscribe_delivers_initial_and_subsequent_snapshots(store):
    snapshots = []
    store.add("notes", {"userId": "u1"})
    sub = store.subscribe("notes", [("userId", "==", "u1")], snapshots.append)

    store.add("notes", {"userId": "u1"})
    store.add("notes", {"userId": "u2"})

    assert [len(s) for s in snapshots] == [1, 2, 2]

    sub.unsubscribe()
    sub.unsubscribe()
    store.add("notes", {"userId": "u1"})
    assert len(snapshots) == 3
    assert store.listener_count == 0


def test_failing_listener_does_not_break_writer(store):
    def boom(docs):
        if docs:
            raise RuntimeError("render failed")

    store.subscribe("notes", [], boom)
    store.add("notes", {"x": 1})
    assert len(store.list("notes")) == 1


def test_batch_update_is_all_or_nothing(store):
    a = store.add("notes", {"leido": False})
    b = store.add("notes", {"leido": False})

    with pytest.raises(DocumentNotFound):
        store.batch_update("notes", [(a, {"leido": True}), ("gone", {"leido": True}), (b, {"leido": True})])

    assert store.get("notes", a)["leido"] is False
    assert store.get("notes", b)["leido"] is False


def test_update_missing_document(store):
    with pytest.raises(DocumentNotFound):
        store.update("notes", "gone", {"leido": True})


def test_delete_missing_document_is_noop(store):
    store.delete("notes", "gone")


def test_transaction_rolls_back_on_error(store):
    doc_id = store.add("items", {"stockActual": 5})

    def txn(t):
        t.update("items", doc_id, {"stockActual": 0})
        t.add("moves", {"cantidad": 5})
        raise ValueError("abort")

    with pytest.raises(ValueError):
        store.run_transaction(txn)

    assert store.get("items", doc_id)["stockActual"] == 5
    assert store.list("moves") == []


def test_transaction_commits_and_notifies(store):
    doc_id = store.add("items", {"stockActual": 5})
    seen = []
    store.subscribe("items", [], seen.append)

    result = store.run_transaction(lambda t: t.update("items", doc_id, {"stockActual": 7}) or "done")

    assert result == "done"
    assert seen[-1][0]["stockActual"] == 7


# ---------------------------------------------------------------------------
# FirestoreStore against a mocked client
# ---------------------------------------------------------------------------
@pytest.fixture
def client():
    return mock.MagicMock()


def test_firestore_update_wraps_permission_error(client):
    client.collection.return_value.document.return_value.update.side_effect = (
        google_exceptions.PermissionDenied("denied")
    )
    store = FirestoreStore(client=client)

    with pytest.raises(StoreError):
        store.update("notificaciones", "n1", {"leido": True})


def test_firestore_not_found_maps_to_document_not_found(client):
    client.collection.return_value.document.return_value.update.side_effect = (
        google_exceptions.NotFound("missing")
    )
    store = FirestoreStore(client=client)

    with pytest.raises(DocumentNotFound):
        store.update("notificaciones", "n1", {"leido": True})


def test_firestore_batch_update_commits_once(client):
    store = FirestoreStore(client=client)
    store.batch_update("notificaciones", [("a", {"leido": True}), ("b", {"leido": True})])

    batch = client.batch.return_value
    assert batch.update.call_count == 2
    batch.commit.assert_called_once_with()


def test_firestore_subscribe_converts_snapshots(client):
    watch = mock.MagicMock()
    query = client.collection.return_value.where.return_value
    query.on_snapshot.return_value = watch
    store = FirestoreStore(client=client)

    received = []
    sub = store.subscribe("notificaciones", [("userId", "==", "u1")], received.append)

    on_snapshot = query.on_snapshot.call_args[0][0]
    snap = mock.MagicMock(id="n1")
    snap.to_dict.return_value = {"leido": False}
    on_snapshot([snap], [], None)

    assert received == [[{"id": "n1", "leido": False}]]
    sub.unsubscribe()
    watch.unsubscribe.assert_called_once_with()
