"""
Dependency Injection Container.

The application factory builds one SchedulingContainer and stores it on
``app.state.container``; request dependencies read it from there.
"""

from fastapi import Request

from .scheduling import InMemorySchedulingContainer, SchedulingContainer


def get_container(request: Request) -> SchedulingContainer:
    """FastAPI dependency returning the application's container."""
    return request.app.state.container


__all__ = [
    "SchedulingContainer",
    "InMemorySchedulingContainer",
    "get_container",
]
