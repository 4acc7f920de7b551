from typing import List

from fastapi import APIRouter, Depends, Query, status

from ..core.deps import get_current_user, get_optional_user, get_store
from ..core.store import Store
from ..models.user import User
from ..schemas.auth import MessageResponse
from ..schemas.blog import (
    AuthorSummary,
    BlogResponse,
    CategoryResponse,
    CommentCreate,
    CommentResponse,
    DraftCreate,
    DraftUpdate,
)
from ..services import comments, library, publishing, reading
from ..services.reading import BlogView

router = APIRouter()


def blog_response(view: BlogView) -> BlogResponse:
    response = BlogResponse.model_validate(view.blog)
    response.categories = [CategoryResponse.model_validate(category) for category in view.categories]
    if view.author is not None:
        response.author = AuthorSummary.model_validate(view.author)
    response.star_count = view.star_count
    response.comment_count = view.comment_count
    response.starred = view.starred
    response.saved = view.saved
    response.following = view.following
    return response


def comment_response(comment, author: User) -> CommentResponse:
    response = CommentResponse.model_validate(comment)
    response.author = AuthorSummary.model_validate(author)
    return response


@router.get("", response_model=List[BlogResponse])
async def get_blogs(
    skip: int = Query(0, ge=0),
    store: Store = Depends(get_store),
    current_user: User = Depends(get_current_user),
):
    """Published posts, newest first."""
    return [blog_response(view) for view in reading.list_feed(store, current_user, skip)]


@router.get("/draft", response_model=List[BlogResponse])
async def get_drafted_blogs(
    store: Store = Depends(get_store),
    current_user: User = Depends(get_current_user),
):
    return [blog_response(view) for view in reading.list_drafts(store, current_user)]


@router.get("/category/{category}", response_model=List[BlogResponse])
async def get_category_blogs(
    category: str,
    skip: int = Query(0, ge=0),
    store: Store = Depends(get_store),
    current_user: User = Depends(get_current_user),
):
    return [blog_response(view) for view in reading.list_category_blogs(store, current_user, category, skip)]


@router.get("/{blog_id}", response_model=BlogResponse)
async def get_blog(
    blog_id: int,
    store: Store = Depends(get_store),
    current_user: User | None = Depends(get_optional_user),
):
    """Read a post. Anonymous readers are allowed."""
    viewer_id = current_user.id if current_user else None
    return blog_response(reading.get_blog(store, blog_id, viewer_id))


@router.post("", response_model=BlogResponse, status_code=status.HTTP_201_CREATED)
async def create_draft(
    blog_data: DraftCreate,
    store: Store = Depends(get_store),
    current_user: User = Depends(get_current_user),
):
    """Create a new draft."""
    blog = publishing.create_draft(store, current_user, blog_data.title, blog_data.content)
    return blog_response(reading.describe_blog(store, blog, current_user.id))


@router.put("/{blog_id}", response_model=BlogResponse)
async def edit_draft(
    blog_id: int,
    blog_data: DraftUpdate,
    store: Store = Depends(get_store),
    current_user: User = Depends(get_current_user),
):
    blog, _ = publishing.edit_draft(
        store,
        blog_id,
        current_user,
        title=blog_data.title,
        content=blog_data.content,
        image_url=blog_data.image_url,
        categories=blog_data.categories,
    )
    return blog_response(reading.describe_blog(store, blog, current_user.id))


@router.patch("/{blog_id}", response_model=BlogResponse)
async def publish_blog(
    blog_id: int,
    store: Store = Depends(get_store),
    current_user: User = Depends(get_current_user),
):
    """Publish a draft and notify the author's followers."""
    blog = publishing.publish(store, blog_id, current_user.id)
    return blog_response(reading.describe_blog(store, blog, current_user.id))


@router.delete("/{blog_id}", response_model=MessageResponse)
async def delete_blog(
    blog_id: int,
    store: Store = Depends(get_store),
    current_user: User = Depends(get_current_user),
):
    publishing.delete_blog(store, blog_id, current_user.id)
    return MessageResponse(message="Blog deleted")


@router.post("/star/{blog_id}", response_model=MessageResponse)
async def star_blog(
    blog_id: int,
    store: Store = Depends(get_store),
    current_user: User = Depends(get_current_user),
):
    library.star_blog(store, current_user, blog_id)
    return MessageResponse(message="Blog starred")


@router.delete("/star/{blog_id}", response_model=MessageResponse)
async def unstar_blog(
    blog_id: int,
    store: Store = Depends(get_store),
    current_user: User = Depends(get_current_user),
):
    library.unstar_blog(store, current_user, blog_id)
    return MessageResponse(message="Blog unstarred")


@router.get("/{blog_id}/comment", response_model=List[CommentResponse])
async def get_comments(
    blog_id: int,
    store: Store = Depends(get_store),
):
    return [comment_response(comment, author) for comment, author in comments.list_comments(store, blog_id)]


@router.post("/{blog_id}/comment", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
async def create_comment(
    blog_id: int,
    comment_data: CommentCreate,
    store: Store = Depends(get_store),
    current_user: User = Depends(get_current_user),
):
    comment = comments.create_comment(store, current_user, blog_id, comment_data.content)
    return comment_response(comment, current_user)


@router.put("/comment/{comment_id}", response_model=CommentResponse)
async def edit_comment(
    comment_id: int,
    comment_data: CommentCreate,
    store: Store = Depends(get_store),
    current_user: User = Depends(get_current_user),
):
    comment = comments.edit_comment(store, current_user, comment_id, comment_data.content)
    return comment_response(comment, current_user)


@router.delete("/comment/{comment_id}", response_model=MessageResponse)
async def delete_comment(
    comment_id: int,
    store: Store = Depends(get_store),
    current_user: User = Depends(get_current_user),
):
    comments.delete_comment(store, current_user, comment_id)
    return MessageResponse(message="Comment deleted")
