from .sse import SseSessionRouter
from .starlette import ASGIEndpoint, create_app

__all__ = ["ASGIEndpoint", "SseSessionRouter", "create_app"]
