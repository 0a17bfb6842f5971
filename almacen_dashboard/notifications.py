"""
Live notification feed for the signed-in user.

NotificationFeed owns one listener on ``notificaciones`` filtered by
``userId``. Every delivered snapshot replaces the held list wholesale;
the list is sorted newest first on the client because combining the
equality filter with a server-side order would need a composite index.
The unread count is always derived from that list.

Mutations go straight to the store and are reflected locally only when
the listener delivers the next snapshot. A failed mutation is logged and
reported as False; nothing is retried.
"""

import functools
import logging
import threading

from .config import (
    DEFAULT_NOTIFICATION_KIND,
    NOTIFICATION_KINDS,
    NOTIFICATIONS_COLLECTION,
)
from .loaders.notifications import notification_from_document
from .models import Notification
from .store import StoreError

logger = logging.getLogger(__name__)


def _created_key(notification: Notification) -> int:
    # Missing timestamps sort as the epoch, i.e. last
    if notification.created_at is None:
        return 0
    return notification.created_at.value


def sort_notifications(notifications: list[Notification]) -> list[Notification]:
    """Return notifications ordered by creation time, newest first."""
    return sorted(notifications, key=_created_key, reverse=True)


def count_unread(notifications: list[Notification]) -> int:
    return sum(1 for n in notifications if not n.read)


class NotificationFeed:
    """Sorted, live view of one user's notifications.

    Use as a context manager to tie the listener to a scope::

        with NotificationFeed(store, user_id) as feed:
            render(feed.notifications, feed.unread_count)
    """

    def __init__(self, store, user_id: str | None = None):
        self._store = store
        self._user_id = user_id
        self._subscription = None
        self._notifications: list[Notification] = []
        # bumped on every teardown so late deliveries from old listeners are dropped
        self._generation = 0
        self._lock = threading.Lock()

    def __enter__(self) -> "NotificationFeed":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    @property
    def store(self):
        return self._store

    @property
    def user_id(self) -> str | None:
        return self._user_id

    @property
    def active(self) -> bool:
        return self._subscription is not None

    @property
    def notifications(self) -> list[Notification]:
        with self._lock:
            return list(self._notifications)

    @property
    def unread_count(self) -> int:
        return count_unread(self.notifications)

    # ------------------------------------------------------------------
    # Listener lifecycle
    # ------------------------------------------------------------------
    def start(self) -> None:
        """Subscribe for the current user. No-op when already listening or signed out."""
        if self._subscription is not None or self._user_id is None:
            return
        callback = functools.partial(self._on_snapshot, self._generation)
        try:
            self._subscription = self._store.subscribe(
                NOTIFICATIONS_COLLECTION,
                [("userId", "==", self._user_id)],
                callback,
            )
        except StoreError:
            logger.exception("Could not subscribe to notifications for %s", self._user_id)
            return
        logger.info("Listening to notifications for %s", self._user_id)

    def stop(self) -> None:
        """Tear the listener down and drop the held notifications."""
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
            logger.info("Stopped notification listener for %s", self._user_id)
        with self._lock:
            self._generation += 1
            self._notifications = []

    def set_user(self, user_id: str | None) -> None:
        """Switch to another user, tearing the old listener down first."""
        if user_id == self._user_id and self.active:
            return
        self.stop()
        self._user_id = user_id
        self.start()

    def _on_snapshot(self, generation: int, docs: list[dict]) -> None:
        notifications = sort_notifications([notification_from_document(doc) for doc in docs])
        with self._lock:
            if generation != self._generation:
                return
            self._notifications = notifications
        logger.debug(
            "Snapshot for %s: %d notifications, %d unread",
            self._user_id, len(notifications), count_unread(notifications),
        )

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def _find(self, notification_id: str) -> Notification | None:
        with self._lock:
            for n in self._notifications:
                if n.id == notification_id:
                    return n
        return None

    def mark_read(self, notification_id: str) -> bool:
        """Set ``leido`` on one notification. Already-read ones succeed without a write.

        Ids outside this user's feed are refused without touching the store.
        """
        current = self._find(notification_id)
        if current is None:
            logger.warning("Notification %s is not in the feed for %s", notification_id, self._user_id)
            return False
        if current.read:
            return True
        try:
            self._store.update(NOTIFICATIONS_COLLECTION, notification_id, {"leido": True})
        except StoreError:
            logger.exception("Error marking notification %s as read", notification_id)
            return False
        return True

    def mark_all_read(self) -> bool:
        """Mark every currently unread notification as read in one atomic batch."""
        unread = [n.id for n in self.notifications if not n.read]
        if not unread:
            return True
        try:
            self._store.batch_update(
                NOTIFICATIONS_COLLECTION,
                [(notification_id, {"leido": True}) for notification_id in unread],
            )
        except StoreError:
            logger.exception("Error marking %d notifications as read", len(unread))
            return False
        logger.info("Marked %d notifications as read for %s", len(unread), self._user_id)
        return True

    def delete(self, notification_id: str) -> bool:
        """Delete one notification from this user's feed. Read flags are left alone."""
        if self._find(notification_id) is None:
            logger.warning("Notification %s is not in the feed for %s", notification_id, self._user_id)
            return False
        try:
            self._store.delete(NOTIFICATIONS_COLLECTION, notification_id)
        except StoreError:
            logger.exception("Error deleting notification %s", notification_id)
            return False
        return True


def rebind_feed(feed: NotificationFeed | None, store, user_id: str | None) -> NotificationFeed:
    """Point a long-lived feed at ``store`` and ``user_id``.

    A feed bound to a different store is stopped before it is replaced,
    so at most one listener per holder stays open.
    """
    if feed is not None and feed.store is not store:
        feed.stop()
        feed = None
    if feed is None:
        feed = NotificationFeed(store)
    feed.set_user(user_id)
    return feed


def create_notification(
    store,
    user_id: str,
    title: str,
    message: str,
    kind: str = DEFAULT_NOTIFICATION_KIND,
    link: str | None = None,
) -> str | None:
    """Write a new unread notification for ``user_id``.

    Returns the new document id, or None when the write failed (the
    failure is logged; the action that triggered it carries on).
    """
    if kind not in NOTIFICATION_KINDS:
        raise ValueError(f"Unknown notification kind: {kind!r}")

    data = {
        "userId": user_id,
        "titulo": title,
        "mensaje": message,
        "tipo": kind,
        "leido": False,
        "fecha": store.server_timestamp(),
    }
    if link:
        data["link"] = link

    try:
        return store.add(NOTIFICATIONS_COLLECTION, data)
    except StoreError:
        logger.exception("Error creating notification for %s", user_id)
        return None
