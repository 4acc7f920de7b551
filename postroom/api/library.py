from typing import List

from fastapi import APIRouter, Depends, Query

from ..core.deps import get_current_user, get_store
from ..core.store import Store
from ..models.user import User
from ..schemas.auth import MessageResponse
from ..schemas.blog import BlogResponse, CategoryResponse, SearchResponse
from ..services import library, reading, search
from .blogs import blog_response

router = APIRouter()


@router.get("/list", response_model=List[BlogResponse])
async def get_saved_blogs(
    store: Store = Depends(get_store),
    current_user: User = Depends(get_current_user),
):
    """The reader's saved list, most recently saved first."""
    return [blog_response(view) for view in library.list_saved_blogs(store, current_user)]


@router.post("/list/blog/{blog_id}", response_model=MessageResponse)
async def add_blog(
    blog_id: int,
    store: Store = Depends(get_store),
    current_user: User = Depends(get_current_user),
):
    library.save_blog(store, current_user, blog_id)
    return MessageResponse(message="Blog added to list")


@router.delete("/list/blog/{blog_id}", response_model=MessageResponse)
async def remove_blog(
    blog_id: int,
    store: Store = Depends(get_store),
    current_user: User = Depends(get_current_user),
):
    library.unsave_blog(store, current_user, blog_id)
    return MessageResponse(message="Blog removed from list")


@router.get("/category", response_model=List[CategoryResponse])
async def get_categories(
    store: Store = Depends(get_store),
    current_user: User = Depends(get_current_user),
):
    return reading.list_categories(store)


@router.get("/search", response_model=List[BlogResponse])
async def search_blogs(
    query: str = Query(""),
    skip: int = Query(0, ge=0),
    store: Store = Depends(get_store),
    current_user: User = Depends(get_current_user),
):
    return [blog_response(view) for view in search.search_blogs(store, current_user, query, skip)]


@router.get("/search/recent", response_model=List[SearchResponse])
async def recent_searches(
    store: Store = Depends(get_store),
    current_user: User = Depends(get_current_user),
):
    return search.recent_searches(store, current_user)


@router.delete("/search/{search_id}", response_model=MessageResponse)
async def delete_search(
    search_id: int,
    store: Store = Depends(get_store),
    current_user: User = Depends(get_current_user),
):
    search.delete_search(store, current_user, search_id)
    return MessageResponse(message="Search removed")
