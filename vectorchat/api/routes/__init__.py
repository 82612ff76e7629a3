"""
Route modules for the vectorchat API.

Each module defines a FastAPI APIRouter for a specific domain.
All routers are collected in ``all_routers`` for easy inclusion.
"""

from vectorchat.api.routes.system import router as system_router
from vectorchat.api.routes.chat import router as chat_router
from vectorchat.api.routes.relay import router as relay_router

all_routers = [
    system_router,
    chat_router,
    relay_router,
]

__all__ = ["all_routers"]
