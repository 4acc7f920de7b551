import logging

from sqlalchemy.exc import IntegrityError

from ..core.errors import Conflict, Forbidden, NotFound
from ..core.store import Store
from ..models import Follow, User

logger = logging.getLogger(__name__)


def _find_target(store: Store, username: str) -> User:
    target = store.find_user_by_username(username)
    if target is None:
        raise NotFound("account", message="Account not found")
    return target


def follow_user(store: Store, follower: User, username: str) -> Follow:
    target = _find_target(store, username)
    if target.id == follower.id:
        raise Forbidden("You cannot follow yourself")
    if store.find_follow(target.id, follower.id):
        raise Conflict("You already follow this account")

    try:
        follow = store.create_follow(target.id, follower.id)
        store.commit()
    except IntegrityError as e:
        # Lost a race with an identical follow request
        store.rollback()
        raise Conflict("You already follow this account") from e

    store.refresh(follow)
    logger.info(f"User {follower.id} followed {target.id}")
    return follow


def unfollow_user(store: Store, follower: User, username: str) -> None:
    target = _find_target(store, username)
    follow = store.find_follow(target.id, follower.id)
    if follow is None:
        raise NotFound("follow", message="You do not follow this account")

    store.delete_follow(follow)
    store.commit()
    logger.info(f"User {follower.id} unfollowed {target.id}")
