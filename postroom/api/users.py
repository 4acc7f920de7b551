from typing import List

from fastapi import APIRouter, Depends

from ..core.deps import get_current_user, get_link_base, get_store, get_token_manager
from ..core.store import Store
from ..models.user import User
from ..schemas.auth import MessageResponse
from ..schemas.blog import AuthorSummary, BlogSummary, CategoryResponse
from ..schemas.user import (
    FollowResponse,
    InterestsUpdate,
    NotificationResponse,
    NotificationsSeenResponse,
    ProfileResponse,
    ProfileUpdate,
    UserResponse,
)
from ..services import accounts, follows, notifications
from ..services.tokens import TokenManager
from .blogs import blog_response

router = APIRouter()


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(current_user: User = Depends(get_current_user)):
    """Get current user information."""
    return current_user


@router.put("/user", response_model=UserResponse)
async def edit_user(
    profile: ProfileUpdate,
    store: Store = Depends(get_store),
    current_user: User = Depends(get_current_user),
):
    return accounts.edit_profile(
        store,
        current_user,
        fullname=profile.fullname,
        username=profile.username,
        bio=profile.bio,
        image_url=profile.image_url,
    )


@router.delete("/user", response_model=MessageResponse)
async def request_account_deletion(
    tokens: TokenManager = Depends(get_token_manager),
    current_user: User = Depends(get_current_user),
    link_base: str = Depends(get_link_base),
):
    """Email a deletion confirmation link."""
    await accounts.request_account_deletion(tokens, current_user, link_base)
    return MessageResponse(message="email sent")


@router.delete("/user/{token}", response_model=MessageResponse)
async def delete_account(
    token: str,
    store: Store = Depends(get_store),
    tokens: TokenManager = Depends(get_token_manager),
    current_user: User = Depends(get_current_user),
):
    accounts.delete_account(store, tokens, token, current_user.id)
    return MessageResponse(message="account deleted")


@router.post("/follow/{username}", response_model=FollowResponse)
async def follow(
    username: str,
    store: Store = Depends(get_store),
    current_user: User = Depends(get_current_user),
):
    return follows.follow_user(store, current_user, username)


@router.delete("/follow/{username}", response_model=MessageResponse)
async def unfollow(
    username: str,
    store: Store = Depends(get_store),
    current_user: User = Depends(get_current_user),
):
    follows.unfollow_user(store, current_user, username)
    return MessageResponse(message="unfollowed")


@router.get("/notification", response_model=List[NotificationResponse])
async def get_notifications(
    store: Store = Depends(get_store),
    current_user: User = Depends(get_current_user),
):
    """Newest first, each with a summary of the post it announces."""
    listed = notifications.list_notifications(store, current_user)
    blogs = store.find_blogs_with_authors([notification.blog_id for notification in listed])

    responses = []
    for notification in listed:
        response = NotificationResponse.model_validate(notification)
        if notification.blog_id in blogs:
            blog, author = blogs[notification.blog_id]
            response.blog = BlogSummary.model_validate(blog)
            response.blog.author = AuthorSummary.model_validate(author)
        responses.append(response)
    return responses


@router.patch("/notification", response_model=NotificationsSeenResponse)
async def mark_notifications_as_seen(
    store: Store = Depends(get_store),
    current_user: User = Depends(get_current_user),
):
    return NotificationsSeenResponse(updated=notifications.mark_all_seen(store, current_user))


@router.get("/user/{username}", response_model=ProfileResponse)
async def get_profile(
    username: str,
    store: Store = Depends(get_store),
    current_user: User = Depends(get_current_user),
):
    profile = accounts.get_profile(store, current_user, username)
    response = ProfileResponse.model_validate(profile.user)
    response.follower_count = profile.follower_count
    response.following_count = profile.following_count
    response.following = profile.following
    response.blogs = [blog_response(view) for view in profile.blogs]
    return response


@router.post("/user/category", response_model=List[CategoryResponse])
async def add_categories(
    interests: InterestsUpdate,
    store: Store = Depends(get_store),
    current_user: User = Depends(get_current_user),
):
    """Pick existing categories as interests."""
    return accounts.add_interests(store, current_user, interests.categories)
