"""Rich-powered views over the client components."""

from .admin import AdminView
from .home import HomeView

__all__ = ["AdminView", "HomeView"]
