"""Middleware — the protocol, and the mount dispatcher built on it."""

from perch.middleware.mount import Mount, MountPoint, MountRegistry, MountSpec
from perch.middleware.protocol import AnyResponse, Middleware, Next

__all__ = [
    "AnyResponse",
    "Middleware",
    "Mount",
    "MountPoint",
    "MountRegistry",
    "MountSpec",
    "Next",
]
