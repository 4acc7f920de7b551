"""
Reader-side bookmarks: stars and the saved list. Both apply to published
posts only, and each reader can star or save a post once.
"""

from typing import List

from sqlalchemy.exc import IntegrityError

from ..core.errors import Conflict, NotFound
from ..core.store import Store
from ..models import Blog, SavedBlog, Star, User
from .reading import BlogView, describe_blogs


def _find_published(store: Store, blog_id: int) -> Blog:
    blog = store.find_published_blog(blog_id)
    if blog is None:
        raise NotFound("blog", message="Blog not found")
    return blog


def star_blog(store: Store, user: User, blog_id: int) -> Star:
    blog = _find_published(store, blog_id)
    if store.find_star(blog.id, user.id):
        raise Conflict("You already starred this blog")

    try:
        star = store.create_star(blog.id, user.id)
        store.commit()
    except IntegrityError as e:
        store.rollback()
        raise Conflict("You already starred this blog") from e
    store.refresh(star)
    return star


def unstar_blog(store: Store, user: User, blog_id: int) -> None:
    blog = _find_published(store, blog_id)
    star = store.find_star(blog.id, user.id)
    if star is None:
        raise NotFound("star", message="You didn't star this blog")

    store.delete_row(star)
    store.commit()


def save_blog(store: Store, user: User, blog_id: int) -> SavedBlog:
    blog = _find_published(store, blog_id)
    if store.find_saved(blog.id, user.id):
        raise Conflict("Blog is already in list")

    try:
        saved = store.create_saved(blog.id, user.id)
        store.commit()
    except IntegrityError as e:
        store.rollback()
        raise Conflict("Blog is already in list") from e
    store.refresh(saved)
    return saved


def unsave_blog(store: Store, user: User, blog_id: int) -> None:
    blog = store.find_blog(blog_id)
    if blog is None:
        raise NotFound("blog", message="Blog not found")
    saved = store.find_saved(blog.id, user.id)
    if saved is None:
        raise NotFound("saved_blog", message="Blog is not in list")

    store.delete_row(saved)
    store.commit()


def list_saved_blogs(store: Store, user: User) -> List[BlogView]:
    """Most recently saved first."""
    return describe_blogs(store, store.list_saved_blogs(user.id), user.id)
