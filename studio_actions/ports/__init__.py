"""Port interfaces (Hexagonal Architecture)."""

from studio_actions.ports.outbound import DocumentStorePort, PatchPort

__all__ = [
    "DocumentStorePort",
    "PatchPort",
]
