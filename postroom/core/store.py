"""
Credential store: every database read and write the services perform.

Methods stage changes on the wrapped SQLModel session and flush them so
generated ids are available; the calling service decides when to
``commit()`` so that related writes land in one transaction.
"""

from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy import delete, func, or_, update
from sqlmodel import Session, select

from ..models import (
    TOKEN_MODELS,
    Blog,
    BlogCategory,
    Category,
    Comment,
    Follow,
    Notification,
    SavedBlog,
    Search,
    SingleUseToken,
    Star,
    TokenPurpose,
    User,
    UserCategory,
)

# Rows that hang off a blog and go away with it
BLOG_DEPENDENTS = (Notification, BlogCategory, Comment, Star, SavedBlog)


class Store:
    def __init__(self, db: Session):
        self.db = db

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()

    def refresh(self, instance) -> None:
        self.db.refresh(instance)

    # --- Users ---

    def find_user_by_id(self, user_id: int) -> Optional[User]:
        return self.db.get(User, user_id)

    def find_user_by_email(self, email: str) -> Optional[User]:
        return self.db.exec(select(User).where(User.email == email)).first()

    def find_user_by_username(self, username: str) -> Optional[User]:
        return self.db.exec(select(User).where(User.username == username)).first()

    def create_user(self, user: User) -> User:
        self.db.add(user)
        self.db.flush()
        return user

    def update_user(self, user: User, **changes) -> User:
        for field, value in changes.items():
            setattr(user, field, value)
        self.db.add(user)
        self.db.flush()
        return user

    def delete_user(self, user: User) -> None:
        """Delete a user and everything they own or left on other people's posts."""
        blog_ids = select(Blog.id).where(Blog.author_id == user.id)
        self._delete_blog_dependents(blog_ids)
        self.db.exec(delete(Blog).where(Blog.author_id == user.id))

        for model in (Notification, Star, SavedBlog, Search, UserCategory):
            self.db.exec(delete(model).where(model.user_id == user.id))
        self.db.exec(delete(Comment).where(Comment.author_id == user.id))
        self.db.exec(
            delete(Follow).where(or_(Follow.user_id == user.id, Follow.follower_id == user.id))
        )
        for model in TOKEN_MODELS.values():
            self.db.exec(delete(model).where(model.user_id == user.id))

        self.db.delete(user)
        self.db.flush()

    def count_followers(self, user_id: int) -> int:
        return self.db.exec(select(func.count(Follow.id)).where(Follow.user_id == user_id)).one()

    def count_following(self, user_id: int) -> int:
        return self.db.exec(select(func.count(Follow.id)).where(Follow.follower_id == user_id)).one()

    # --- Single-use tokens ---

    def create_token(self, purpose: TokenPurpose, user_id: int, value: str, created_at: datetime) -> SingleUseToken:
        token = TOKEN_MODELS[purpose](token=value, user_id=user_id, created_at=created_at)
        self.db.add(token)
        self.db.flush()
        return token

    def find_token_by_value(self, purpose: TokenPurpose, value: str) -> Optional[SingleUseToken]:
        model = TOKEN_MODELS[purpose]
        return self.db.exec(select(model).where(model.token == value)).first()

    def mark_token_consumed(self, purpose: TokenPurpose, token_id: int, consumed_at: datetime) -> bool:
        """
        Consume a token only if nobody has yet.

        A single conditional UPDATE, so of two racing requests at most one
        sees a matched row. Returns whether this call consumed it.
        """
        model = TOKEN_MODELS[purpose]
        result = self.db.exec(
            update(model)
            .where(model.id == token_id, model.consumed_at.is_(None))
            .values(consumed_at=consumed_at)
            .execution_options(synchronize_session="evaluate")
        )
        return result.rowcount == 1

    def consume_outstanding_tokens(self, purpose: TokenPurpose, user_id: int, consumed_at: datetime) -> int:
        model = TOKEN_MODELS[purpose]
        result = self.db.exec(
            update(model)
            .where(model.user_id == user_id, model.consumed_at.is_(None))
            .values(consumed_at=consumed_at)
            .execution_options(synchronize_session="evaluate")
        )
        return result.rowcount

    # --- Follows ---

    def find_follow(self, user_id: int, follower_id: int) -> Optional[Follow]:
        return self.db.exec(
            select(Follow).where(Follow.user_id == user_id, Follow.follower_id == follower_id)
        ).first()

    def create_follow(self, user_id: int, follower_id: int) -> Follow:
        follow = Follow(user_id=user_id, follower_id=follower_id)
        self.db.add(follow)
        self.db.flush()
        return follow

    def delete_follow(self, follow: Follow) -> None:
        self.db.delete(follow)
        self.db.flush()

    def list_followers(self, user_id: int) -> List[int]:
        return list(self.db.exec(select(Follow.follower_id).where(Follow.user_id == user_id)).all())

    # --- Blogs ---

    def create_blog(self, blog: Blog) -> Blog:
        self.db.add(blog)
        self.db.flush()
        return blog

    def find_blog(self, blog_id: int) -> Optional[Blog]:
        return self.db.get(Blog, blog_id)

    def find_draft_blog(self, blog_id: int) -> Optional[Blog]:
        return self.db.exec(select(Blog).where(Blog.id == blog_id, Blog.draft == True)).first()  # noqa: E712

    def find_published_blog(self, blog_id: int) -> Optional[Blog]:
        return self.db.exec(select(Blog).where(Blog.id == blog_id, Blog.draft == False)).first()  # noqa: E712

    def find_blogs_with_authors(self, blog_ids: Sequence[int]) -> Dict[int, Tuple[Blog, User]]:
        rows = self.db.exec(
            select(Blog, User).join(User, User.id == Blog.author_id).where(Blog.id.in_(list(blog_ids)))
        ).all()
        return {blog.id: (blog, author) for blog, author in rows}

    def set_blog_published(self, blog: Blog, published_at: datetime) -> Blog:
        blog.draft = False
        blog.updated_at = published_at
        self.db.add(blog)
        self.db.flush()
        return blog

    def delete_blog(self, blog: Blog) -> None:
        self._delete_blog_dependents([blog.id])
        self.db.delete(blog)
        self.db.flush()

    def _delete_blog_dependents(self, blog_ids) -> None:
        for model in BLOG_DEPENDENTS:
            self.db.exec(delete(model).where(model.blog_id.in_(blog_ids)))

    def list_published_blogs(self, skip: int, limit: int) -> List[Blog]:
        return list(
            self.db.exec(
                select(Blog)
                .where(Blog.draft == False)  # noqa: E712
                .order_by(Blog.created_at.desc(), Blog.id.desc())
                .offset(skip)
                .limit(limit)
            ).all()
        )

    def list_author_blogs(self, author_id: int, draft: bool) -> List[Blog]:
        return list(
            self.db.exec(
                select(Blog)
                .where(Blog.author_id == author_id, Blog.draft == draft)
                .order_by(Blog.created_at.desc(), Blog.id.desc())
            ).all()
        )

    def list_category_blogs(self, category_id: int, skip: int, limit: int) -> List[Blog]:
        return list(
            self.db.exec(
                select(Blog)
                .join(BlogCategory, BlogCategory.blog_id == Blog.id)
                .where(BlogCategory.category_id == category_id, Blog.draft == False)  # noqa: E712
                .order_by(Blog.created_at.desc(), Blog.id.desc())
                .offset(skip)
                .limit(limit)
            ).all()
        )

    def search_published_blogs(self, query: str, skip: int, limit: int) -> List[Blog]:
        """Case-insensitive title match."""
        return list(
            self.db.exec(
                select(Blog)
                .where(Blog.title.icontains(query, autoescape=True), Blog.draft == False)  # noqa: E712
                .order_by(Blog.created_at.desc(), Blog.id.desc())
                .offset(skip)
                .limit(limit)
            ).all()
        )

    # --- Categories ---

    def find_category_by_name(self, name: str) -> Optional[Category]:
        return self.db.exec(select(Category).where(Category.name == name)).first()

    def list_categories(self) -> List[Category]:
        return list(self.db.exec(select(Category).order_by(Category.name)).all())

    def set_blog_categories(self, blog: Blog, names: Sequence[str]) -> List[Category]:
        """Replace the blog's category tags, creating categories that don't exist yet."""
        self.db.exec(delete(BlogCategory).where(BlogCategory.blog_id == blog.id))

        categories = []
        for name in dict.fromkeys(names):
            category = self.find_category_by_name(name)
            if category is None:
                category = Category(name=name)
                self.db.add(category)
                self.db.flush()
            self.db.add(BlogCategory(blog_id=blog.id, category_id=category.id))
            categories.append(category)
        self.db.flush()
        return categories

    def list_blog_categories(self, blog_id: int) -> List[Category]:
        return list(
            self.db.exec(
                select(Category)
                .join(BlogCategory, BlogCategory.category_id == Category.id)
                .where(BlogCategory.blog_id == blog_id)
                .order_by(Category.name)
            ).all()
        )

    def add_user_category(self, user_id: int, category_id: int) -> bool:
        """Record an interest. Returns False when the user already had it."""
        existing = self.db.exec(
            select(UserCategory).where(UserCategory.user_id == user_id, UserCategory.category_id == category_id)
        ).first()
        if existing:
            return False
        self.db.add(UserCategory(user_id=user_id, category_id=category_id))
        self.db.flush()
        return True

    def list_user_categories(self, user_id: int) -> List[Category]:
        return list(
            self.db.exec(
                select(Category)
                .join(UserCategory, UserCategory.category_id == Category.id)
                .where(UserCategory.user_id == user_id)
                .order_by(Category.name)
            ).all()
        )

    # --- Stars and saved list ---

    def find_star(self, blog_id: int, user_id: int) -> Optional[Star]:
        return self.db.exec(select(Star).where(Star.blog_id == blog_id, Star.user_id == user_id)).first()

    def create_star(self, blog_id: int, user_id: int) -> Star:
        star = Star(blog_id=blog_id, user_id=user_id)
        self.db.add(star)
        self.db.flush()
        return star

    def count_stars(self, blog_id: int) -> int:
        return self.db.exec(select(func.count(Star.id)).where(Star.blog_id == blog_id)).one()

    def find_saved(self, blog_id: int, user_id: int) -> Optional[SavedBlog]:
        return self.db.exec(
            select(SavedBlog).where(SavedBlog.blog_id == blog_id, SavedBlog.user_id == user_id)
        ).first()

    def create_saved(self, blog_id: int, user_id: int) -> SavedBlog:
        saved = SavedBlog(blog_id=blog_id, user_id=user_id)
        self.db.add(saved)
        self.db.flush()
        return saved

    def list_saved_blogs(self, user_id: int) -> List[Blog]:
        """Most recently saved first."""
        return list(
            self.db.exec(
                select(Blog)
                .join(SavedBlog, SavedBlog.blog_id == Blog.id)
                .where(SavedBlog.user_id == user_id)
                .order_by(SavedBlog.created_at.desc(), SavedBlog.id.desc())
            ).all()
        )

    def delete_row(self, row) -> None:
        self.db.delete(row)
        self.db.flush()

    # --- Comments ---

    def create_comment(self, comment: Comment) -> Comment:
        self.db.add(comment)
        self.db.flush()
        return comment

    def find_comment(self, comment_id: int) -> Optional[Comment]:
        return self.db.get(Comment, comment_id)

    def list_comments(self, blog_id: int) -> List[Tuple[Comment, User]]:
        """Newest first, each with its author."""
        return list(
            self.db.exec(
                select(Comment, User)
                .join(User, User.id == Comment.author_id)
                .where(Comment.blog_id == blog_id)
                .order_by(Comment.created_at.desc(), Comment.id.desc())
            ).all()
        )

    def count_comments(self, blog_id: int) -> int:
        return self.db.exec(select(func.count(Comment.id)).where(Comment.blog_id == blog_id)).one()

    # --- Recent searches ---

    def record_search(self, user_id: int, content: str, searched_at: datetime, keep: int) -> Search:
        """Store a query as the newest search, dropping repeats and all but the newest ``keep``."""
        self.db.exec(delete(Search).where(Search.user_id == user_id, Search.content == content))
        search = Search(user_id=user_id, content=content, created_at=searched_at)
        self.db.add(search)
        self.db.flush()

        kept = self.db.exec(
            select(Search.id)
            .where(Search.user_id == user_id)
            .order_by(Search.created_at.desc(), Search.id.desc())
            .limit(keep)
        ).all()
        self.db.exec(delete(Search).where(Search.user_id == user_id, Search.id.not_in(list(kept))))
        return search

    def list_searches(self, user_id: int) -> List[Search]:
        return list(
            self.db.exec(
                select(Search)
                .where(Search.user_id == user_id)
                .order_by(Search.created_at.desc(), Search.id.desc())
            ).all()
        )

    def find_search(self, search_id: int) -> Optional[Search]:
        return self.db.get(Search, search_id)

    # --- Notifications ---

    def create_notification(self, blog_id: int, user_id: int) -> Notification:
        notification = Notification(blog_id=blog_id, user_id=user_id)
        self.db.add(notification)
        return notification

    def list_notifications(self, user_id: int) -> List[Notification]:
        return list(
            self.db.exec(
                select(Notification)
                .where(Notification.user_id == user_id)
                .order_by(Notification.created_at.desc(), Notification.id.desc())
            ).all()
        )

    def mark_notifications_seen(self, user_id: int) -> int:
        result = self.db.exec(
            update(Notification)
            .where(Notification.user_id == user_id, Notification.seen == False)  # noqa: E712
            .values(seen=True)
            .execution_options(synchronize_session="evaluate")
        )
        return result.rowcount
