"""Conversion of ``notificaciones`` documents into Notification records."""

import logging

from ..config import DEFAULT_NOTIFICATION_KIND, NOTIFICATION_FIELDS, NOTIFICATION_KINDS
from ..models import Notification
from .utils import normalise_timestamp, rename_fields

logger = logging.getLogger(__name__)


def notification_from_document(doc: dict) -> Notification:
    """Map a raw notification document to a Notification.

    Unknown ``tipo`` values fall back to the default kind; a missing
    ``leido`` means unread.
    """
    fields = rename_fields(doc, NOTIFICATION_FIELDS)

    kind = fields.get("kind") or DEFAULT_NOTIFICATION_KIND
    if kind not in NOTIFICATION_KINDS:
        logger.debug("Unknown notification kind %r on %s", kind, doc.get("id"))
        kind = DEFAULT_NOTIFICATION_KIND

    return Notification(
        id=doc["id"],
        user_id=fields.get("user_id"),
        title=fields.get("title") or "",
        message=fields.get("message") or "",
        read=bool(fields.get("read", False)),
        created_at=normalise_timestamp(fields.get("created_at")),
        kind=kind,
        link=fields.get("link") or None,
    )
