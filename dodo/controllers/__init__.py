"""FastAPI routers acting as controllers in the MVC architecture."""

from . import children, lullabies, voice

__all__ = ["children", "lullabies", "voice"]
