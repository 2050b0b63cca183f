# API routers package
from . import organizer

__all__ = ["organizer"]
