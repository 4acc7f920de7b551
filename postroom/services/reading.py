"""
Read side of blogs: single posts, feeds, drafts and categories.

Every listing returns ``BlogView`` objects, which pair a blog with what a
reader sees around it: the author, its tags, star and comment counts and
whether the viewer has starred, saved or follows the author.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from ..core.errors import NotFound
from ..core.store import Store
from ..models import Blog, Category, User

PAGE_SIZE = 10


@dataclass
class BlogView:
    blog: Blog
    author: User
    categories: List[Category] = field(default_factory=list)
    star_count: int = 0
    comment_count: int = 0
    starred: bool = False
    saved: bool = False
    following: bool = False


def describe_blog(store: Store, blog: Blog, viewer_id: Optional[int] = None) -> BlogView:
    view = BlogView(
        blog=blog,
        author=store.find_user_by_id(blog.author_id),
        categories=store.list_blog_categories(blog.id),
        star_count=store.count_stars(blog.id),
        comment_count=store.count_comments(blog.id),
    )
    if viewer_id is not None:
        view.starred = store.find_star(blog.id, viewer_id) is not None
        view.saved = store.find_saved(blog.id, viewer_id) is not None
        if viewer_id != blog.author_id:
            view.following = store.find_follow(blog.author_id, viewer_id) is not None
    return view


def describe_blogs(store: Store, blogs: List[Blog], viewer_id: Optional[int] = None) -> List[BlogView]:
    return [describe_blog(store, blog, viewer_id) for blog in blogs]


def get_blog(store: Store, blog_id: int, viewer_id: Optional[int] = None) -> BlogView:
    """
    Read one post. Drafts are visible to their author only; to anyone else
    a draft does not exist.
    """
    blog = store.find_blog(blog_id)
    if blog is None or (blog.draft and blog.author_id != viewer_id):
        raise NotFound("blog", message="Blog not found")
    return describe_blog(store, blog, viewer_id)


def list_feed(store: Store, viewer: User, skip: int = 0) -> List[BlogView]:
    """Published posts, newest first, one page at a time."""
    return describe_blogs(store, store.list_published_blogs(skip, PAGE_SIZE), viewer.id)


def list_drafts(store: Store, author: User) -> List[BlogView]:
    return describe_blogs(store, store.list_author_blogs(author.id, draft=True), author.id)


def list_categories(store: Store) -> List[Category]:
    return store.list_categories()


def list_category_blogs(store: Store, viewer: User, name: str, skip: int = 0) -> List[BlogView]:
    """Published posts tagged ``name``. An unknown category has no posts."""
    category = store.find_category_by_name(name)
    if category is None:
        return []
    return describe_blogs(store, store.list_category_blogs(category.id, skip, PAGE_SIZE), viewer.id)
