"""Execution engines."""

from .base import ContainerEngine
from .docker import DockerEngine

__all__ = ["ContainerEngine", "DockerEngine"]
