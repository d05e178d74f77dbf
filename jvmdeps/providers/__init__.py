"""Metadata providers the resolver can fetch descriptors from."""

from .base import MetadataProvider
from .memory import InMemoryMetadataProvider
from .repository import RepositoryMetadataProvider

__all__ = [
    "InMemoryMetadataProvider",
    "MetadataProvider",
    "RepositoryMetadataProvider",
]
