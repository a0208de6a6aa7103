"""Registry index access: clients, fuzzy lookup, update with retry, source resolution."""

from .base import InMemoryRegistryClient, RegistryClient
from .index import LocalIndexClient
from .query import fuzzy_query_registry_index
from .source import registry_url
from .update import update_registry_index

__all__ = [
    "RegistryClient",
    "InMemoryRegistryClient",
    "LocalIndexClient",
    "fuzzy_query_registry_index",
    "registry_url",
    "update_registry_index",
]
