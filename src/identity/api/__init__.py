"""Identity domain API package."""

from identity.api.routes import router

__all__ = ["router"]
