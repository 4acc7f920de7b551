import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Sequence

from ..core.clock import utcnow
from ..core.config import settings
from ..core.errors import Conflict, Forbidden, NotFound, ValidationError
from ..core.security import (
    MAX_PASSWORD_BYTES,
    fits_password_hash,
    get_password_hash,
    is_valid_email,
    meets_password_policy,
)
from ..core.store import Store
from ..models import AccountProvider, Category, TokenPurpose, User
from .reading import BlogView, describe_blogs
from .sessions import SessionIssuer
from .tokens import TokenManager

logger = logging.getLogger(__name__)

USERNAME_PATTERN = re.compile(r"^(?!\d)[a-z0-9.]+$")


def _check_email(email: str) -> None:
    if not email:
        raise ValidationError("Missing email address", field="email")
    if not is_valid_email(email):
        raise ValidationError("Invalid email format", field="email")


def _check_password(password: str) -> None:
    if not password:
        raise ValidationError("Missing password", field="password")
    if not fits_password_hash(password):
        raise ValidationError(
            f"Password cannot be longer than {MAX_PASSWORD_BYTES} bytes", field="password"
        )
    if not meets_password_policy(password):
        raise ValidationError("Password does not meet security requirements", field="password")


async def register(
    store: Store,
    tokens: TokenManager,
    sessions: SessionIssuer,
    email: str,
    password: str,
    link_base: str,
) -> tuple[User, str]:
    """
    Create a password account, email its activation link and open a session.

    The user row and its activation token are committed together once the
    email has been sent; a mail failure leaves no trace of the account.
    """
    _check_email(email)
    if store.find_user_by_email(email):
        raise Conflict("User already exists")
    _check_password(password)

    user = store.create_user(
        User(email=email, hashed_password=get_password_hash(password, settings.BCRYPT_ROUNDS))
    )
    await tokens.issue(user, TokenPurpose.ACTIVATE, link_base)
    store.refresh(user)

    logger.info(f"Registered user {user.id}")
    return user, sessions.issue_session(user.id)


def activate(store: Store, tokens: TokenManager, token: str) -> User:
    user_id = tokens.validate(token, TokenPurpose.ACTIVATE)
    user = store.find_user_by_id(user_id)
    if user is None:
        raise NotFound("user")
    if user.is_email_verified:
        raise Conflict("Email is already verified")

    tokens.consume(token, TokenPurpose.ACTIVATE)
    store.update_user(user, is_email_verified=True, updated_at=utcnow())
    store.commit()
    store.refresh(user)
    return user


async def request_password_reset(store: Store, tokens: TokenManager, email: str, link_base: str) -> None:
    _check_email(email)
    user = store.find_user_by_email(email)
    if user is None or user.provider != AccountProvider.DEFAULT:
        raise NotFound("user", message="Email cannot be found or signed in using a provider")

    await tokens.issue(user, TokenPurpose.RESET_PASSWORD, link_base)


def reset_password(store: Store, tokens: TokenManager, token: str, password: str) -> User:
    """Overwrite the password of the token's owner, consuming the token in the same commit."""
    if not password:
        raise ValidationError("Missing new password", field="password")
    user_id = tokens.validate(token, TokenPurpose.RESET_PASSWORD)
    _check_password(password)

    user = store.find_user_by_id(user_id)
    if user is None:
        raise NotFound("user")

    tokens.consume(token, TokenPurpose.RESET_PASSWORD)
    store.update_user(
        user,
        hashed_password=get_password_hash(password, settings.BCRYPT_ROUNDS),
        updated_at=utcnow(),
    )
    store.commit()
    store.refresh(user)
    logger.info(f"Password reset for user {user.id}")
    return user


async def request_account_deletion(tokens: TokenManager, user: User, link_base: str) -> None:
    await tokens.issue(user, TokenPurpose.DELETE_ACCOUNT, link_base)


def delete_account(store: Store, tokens: TokenManager, token: str, requester_id: int) -> None:
    user_id = tokens.validate(token, TokenPurpose.DELETE_ACCOUNT)
    if user_id != requester_id:
        raise Forbidden()

    user = store.find_user_by_id(user_id)
    if user is None:
        raise NotFound("user")

    tokens.consume(token, TokenPurpose.DELETE_ACCOUNT)
    store.delete_user(user)
    store.commit()
    logger.info(f"Deleted account {user_id}")


def edit_profile(
    store: Store,
    user: User,
    fullname: Optional[str] = None,
    username: Optional[str] = None,
    bio: Optional[str] = None,
    image_url: Optional[str] = None,
) -> User:
    """
    Update display fields. Empty values keep the current ones; an
    ``image_url`` of ``"none"`` removes the picture.
    """
    if not (fullname or username or bio or image_url):
        raise ValidationError("Missing fields")

    changes = {}
    if fullname:
        if not 3 <= len(fullname) <= 50:
            raise ValidationError("Fullname length is not supported", field="fullname")
        changes["fullname"] = fullname

    if username:
        if not USERNAME_PATTERN.match(username) or not 3 <= len(username) <= 50:
            raise ValidationError("Username format is not supported", field="username")
        taken = store.find_user_by_username(username)
        if taken is not None and taken.id != user.id:
            raise Conflict("Username is taken")
        changes["username"] = username

    if bio:
        if len(bio) > 250:
            raise ValidationError("Bio is too long", field="bio")
        changes["bio"] = bio

    if image_url:
        changes["image_url"] = None if image_url == "none" else image_url

    changes["updated_at"] = utcnow()
    store.update_user(user, **changes)
    store.commit()
    store.refresh(user)
    return user


@dataclass
class Profile:
    user: User
    follower_count: int
    following_count: int
    blogs: List[BlogView]
    following: Optional[bool] = None


def get_profile(store: Store, viewer: User, username: str) -> Profile:
    """
    Public profile with published posts, newest first. ``following`` tells
    whether the viewer follows the account and is left unset on one's own profile.
    """
    user = store.find_user_by_username(username)
    if user is None:
        raise NotFound("account", message="Account not found")

    profile = Profile(
        user=user,
        follower_count=store.count_followers(user.id),
        following_count=store.count_following(user.id),
        blogs=describe_blogs(store, store.list_author_blogs(user.id, draft=False), viewer.id),
    )
    if viewer.id != user.id:
        profile.following = store.find_follow(user.id, viewer.id) is not None
    return profile


def add_interests(store: Store, user: User, names: Sequence[str]) -> List[Category]:
    """Add existing categories to the user's interests. Unknown names are skipped."""
    if names is None:
        raise ValidationError("No categories provided", field="categories")

    matched = []
    for name in dict.fromkeys(names):
        category = store.find_category_by_name(name)
        if category is None:
            continue
        store.add_user_category(user.id, category.id)
        matched.append(category)
    store.commit()
    return matched
