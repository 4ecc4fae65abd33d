"""Route Groups — mount points for the auth, profile, book, manual-book and favorites APIs.

Invariants:
    - Prefixes are fixed; handlers attach to these routers and nowhere else
    - Handlers borrow the shared datastore via Depends(get_datastore)

Design Decisions:
    - Handler business logic lives with each group's owner; this module only
      fixes the path contract the frontend relies on
"""

from fastapi import APIRouter

auth_router = APIRouter(prefix="/api/auth", tags=["auth"])
profiles_router = APIRouter(prefix="/api/profiles", tags=["profiles"])
books_router = APIRouter(prefix="/api/books", tags=["books"])
manual_books_router = APIRouter(prefix="/api/manual-books", tags=["manual-books"])
favorites_router = APIRouter(prefix="/api/favorites", tags=["favorites"])

ROUTE_GROUPS: tuple[APIRouter, ...] = (
    auth_router,
    profiles_router,
    books_router,
    manual_books_router,
    favorites_router,
)
