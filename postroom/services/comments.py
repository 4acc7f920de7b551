import logging
from typing import List, Tuple

from ..core.clock import utcnow
from ..core.errors import Forbidden, NotFound, ValidationError
from ..core.store import Store
from ..models import Blog, Comment, User

logger = logging.getLogger(__name__)


def _find_published(store: Store, blog_id: int) -> Blog:
    blog = store.find_published_blog(blog_id)
    if blog is None:
        raise NotFound("blog", message="Blog not found")
    return blog


def list_comments(store: Store, blog_id: int) -> List[Tuple[Comment, User]]:
    """Comments on a published post, newest first, each with its author."""
    blog = _find_published(store, blog_id)
    return store.list_comments(blog.id)


def create_comment(store: Store, author: User, blog_id: int, content: str) -> Comment:
    blog = _find_published(store, blog_id)
    if not content:
        raise ValidationError("Missing comment content", field="content")

    comment = store.create_comment(Comment(blog_id=blog.id, author_id=author.id, content=content))
    store.commit()
    store.refresh(comment)
    return comment


def edit_comment(store: Store, requester: User, comment_id: int, content: str) -> Comment:
    comment = store.find_comment(comment_id)
    if comment is None:
        raise NotFound("comment", message="Comment not found")
    if comment.author_id != requester.id:
        raise Forbidden("Cannot edit a comment you do not own")
    if not content:
        raise ValidationError("Missing comment content", field="content")

    comment.content = content
    comment.updated_at = utcnow()
    store.commit()
    store.refresh(comment)
    return comment


def delete_comment(store: Store, requester: User, comment_id: int) -> None:
    """The comment's author and the post's author may both remove a comment."""
    comment = store.find_comment(comment_id)
    if comment is None:
        raise NotFound("comment", message="Comment not found")

    blog = store.find_blog(comment.blog_id)
    if requester.id != comment.author_id and (blog is None or requester.id != blog.author_id):
        raise Forbidden()

    store.delete_row(comment)
    store.commit()
    logger.info(f"User {requester.id} deleted comment {comment_id}")
