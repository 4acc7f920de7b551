import logging
from typing import List

from ..core.clock import Clock, utcnow
from ..core.errors import Forbidden, NotFound, ValidationError
from ..core.store import Store
from ..models import Search, User
from .reading import PAGE_SIZE, BlogView, describe_blogs

logger = logging.getLogger(__name__)

# Recent searches kept per user
RECENT_SEARCH_LIMIT = 5


def search_blogs(store: Store, viewer: User, query: str, skip: int = 0, clock: Clock = utcnow) -> List[BlogView]:
    """
    Find published posts whose title contains ``query``, ignoring case.

    The query becomes the viewer's newest recent search; repeating a query
    moves it to the top instead of storing it twice.
    """
    query = (query or "").strip()
    if not query:
        raise ValidationError("Please provide a search query", field="query")

    blogs = store.search_published_blogs(query, skip, PAGE_SIZE)
    store.record_search(viewer.id, query, clock(), keep=RECENT_SEARCH_LIMIT)
    store.commit()
    return describe_blogs(store, blogs, viewer.id)


def recent_searches(store: Store, user: User) -> List[Search]:
    """Newest first."""
    return store.list_searches(user.id)


def delete_search(store: Store, user: User, search_id: int) -> None:
    search = store.find_search(search_id)
    if search is None:
        raise NotFound("search", message="Recent search not found")
    if search.user_id != user.id:
        raise Forbidden()

    store.delete_row(search)
    store.commit()
