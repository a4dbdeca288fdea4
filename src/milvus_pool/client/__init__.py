"""Milvus client handles and the factory that builds them."""

from .collection import Collection, CollectionOptions
from .errors import MilvusOperationError
from .factory import MilvusClientFactory, create_pool
from .handle import MilvusClientHandle


__all__ = [
    "Collection",
    "CollectionOptions",
    "MilvusClientFactory",
    "MilvusClientHandle",
    "MilvusOperationError",
    "create_pool",
]
