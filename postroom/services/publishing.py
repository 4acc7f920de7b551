"""
Draft authoring and the publish/notify fan-out.

Publishing flips a draft to published and creates one unseen notification
per follower of the author. Followers are read once, at publish time;
anyone who follows the author later gets nothing for this post. The flag
flip and every notification are committed together, and the
``(blog_id, user_id)`` unique constraint rules out duplicates.
"""

import logging
from typing import List, Optional, Sequence

from ..core.clock import Clock, utcnow
from ..core.errors import Forbidden, NotFound, ValidationError
from ..core.store import Store
from ..models import Blog, Category, User

logger = logging.getLogger(__name__)


def create_draft(store: Store, author: User, title: str, content: str) -> Blog:
    if not title or not content:
        raise ValidationError("Missing required fields")

    blog = store.create_blog(Blog(author_id=author.id, title=title, content=content))
    store.commit()
    store.refresh(blog)
    return blog


def edit_draft(
    store: Store,
    blog_id: int,
    requester: User,
    title: Optional[str] = None,
    content: Optional[str] = None,
    image_url: Optional[str] = None,
    categories: Sequence[str] = (),
) -> tuple[Blog, List[Category]]:
    """Update a post's text and replace its category tags."""
    blog = store.find_blog(blog_id)
    if blog is None:
        raise NotFound("blog", message="Blog not found")
    if blog.author_id != requester.id:
        raise Forbidden()

    if title is not None:
        blog.title = title
    if content is not None:
        blog.content = content
    if image_url:
        blog.image_url = image_url
    blog.updated_at = utcnow()

    tags = store.set_blog_categories(blog, [name.strip() for name in categories if name and name.strip()])
    store.commit()
    store.refresh(blog)
    return blog, tags


def publish(store: Store, blog_id: int, requester_id: int, clock: Clock = utcnow) -> Blog:
    """
    Publish a draft and notify the author's followers.

    Raises ``NotFound`` when there is no draft with this id, ``Forbidden``
    when the requester is not the author and ``ValidationError`` when the
    title or content is empty. Nothing is written in any of those cases.
    """
    blog = store.find_draft_blog(blog_id)
    if blog is None:
        raise NotFound("blog", message="Blog not found")
    if blog.author_id != requester_id:
        raise Forbidden()
    if not blog.title or not blog.content:
        raise ValidationError("Blog title and content cannot be empty")

    store.set_blog_published(blog, clock())

    followers = store.list_followers(blog.author_id)
    for follower_id in followers:
        store.create_notification(blog.id, follower_id)

    store.commit()
    store.refresh(blog)
    logger.info(f"Published blog {blog.id}, notified {len(followers)} follower(s)")
    return blog


def delete_blog(store: Store, blog_id: int, requester_id: int) -> None:
    """Delete a post with its notifications, tags, comments, stars and saved-list entries."""
    blog = store.find_blog(blog_id)
    if blog is None:
        raise NotFound("blog", message="Blog not found")
    if blog.author_id != requester_id:
        raise Forbidden()

    store.delete_blog(blog)
    store.commit()
    logger.info(f"Deleted blog {blog_id}")
