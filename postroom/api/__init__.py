from fastapi import APIRouter

from .auth import router as auth_router
from .users import router as users_router
from .blogs import router as blogs_router
from .library import router as library_router

api_router = APIRouter(prefix="/api")

api_router.include_router(auth_router, tags=["authentication"])
api_router.include_router(users_router, tags=["users"])
api_router.include_router(blogs_router, prefix="/blog", tags=["blogs"])
api_router.include_router(library_router, tags=["library"])
