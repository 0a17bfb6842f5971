"""Record types shared by the loaders and the notification feed."""

from dataclasses import dataclass

import pandas as pd

from .config import DEFAULT_NOTIFICATION_KIND, NOTIFICATION_STYLES


@dataclass(frozen=True)
class Notification:
    id: str
    user_id: str | None
    title: str
    message: str
    read: bool = False
    created_at: pd.Timestamp | None = None
    kind: str = DEFAULT_NOTIFICATION_KIND
    link: str | None = None

    @property
    def style(self) -> dict:
        """Badge colour and icon for this notification's kind."""
        return NOTIFICATION_STYLES.get(self.kind, NOTIFICATION_STYLES[DEFAULT_NOTIFICATION_KIND])
