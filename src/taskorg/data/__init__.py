"""
Persistence layer: the gateway contract, an in-memory store and the YAML file store.
"""

from .gateway import PersistenceGateway, MemoryGateway
from .store import YAMLGateway

__all__ = [
    'PersistenceGateway',
    'MemoryGateway',
    'YAMLGateway'
]
