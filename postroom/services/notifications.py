from typing import List

from ..core.store import Store
from ..models import Notification, User


def list_notifications(store: Store, user: User) -> List[Notification]:
    """Newest first."""
    return store.list_notifications(user.id)


def mark_all_seen(store: Store, user: User) -> int:
    count = store.mark_notifications_seen(user.id)
    store.commit()
    return count
