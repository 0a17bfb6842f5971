from datetime import datetime, timedelta, timezone

import pytest

from almacen_dashboard.config import NOTIFICATIONS_COLLECTION
from almacen_dashboard.store import MemoryStore

BASE_TIME = datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc)


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def add_notification(store):
    """Write a notification document; ``hours`` offsets it from BASE_TIME."""

    def _add(user_id="u1", title="Aviso", read=False, hours=0, kind="info", with_date=True):
        data = {
            "userId": user_id,
            "titulo": title,
            "mensaje": f"{title} mensaje",
            "tipo": kind,
            "leido": read,
        }
        if with_date:
            data["fecha"] = BASE_TIME + timedelta(hours=hours)
        return store.add(NOTIFICATIONS_COLLECTION, data)

    return _add
