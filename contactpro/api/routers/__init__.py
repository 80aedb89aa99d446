"""API routers."""
from .contacts import router as contacts_router
from .data import router as data_router

__all__ = ["contacts_router", "data_router"]
