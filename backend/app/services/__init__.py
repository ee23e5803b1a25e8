"""Backend services bridging routers and the core library."""

from . import issue_service

__all__ = ["issue_service"]
