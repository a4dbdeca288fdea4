"""Named connection pool for Milvus vector database clients.

Key Responsibilities:
    - Export the generic :class:`HandlePool` and its error taxonomy
    - Export the Milvus client handle, its factory, and the collection facade
    - Export connection options and the schema builder

Collaborators:
    - Upstream: Applications that need long-lived, named Milvus connections
    - Downstream: ``pymilvus`` for the driver, ``pydantic`` for configuration

Side Effects:
    - None on import; connections are only opened by the factory

Thread Safety:
    - Pools and handles are safe to share between threads

Example:
    >>> from milvus_pool import ClientOptions, create_pool
    >>> pool = create_pool()
    >>> client = pool.must_get("search", ClientOptions(address="milvus:19530"))
    >>> client.list_collections()
    []
    >>> pool.close()
"""

from .client import (
    Collection,
    CollectionOptions,
    MilvusClientFactory,
    MilvusClientHandle,
    MilvusOperationError,
    create_pool,
)
from .config import ClientOptions, PoolConfig, PoolSettings, get_settings, load_pool_config
from .pool import (
    HandleAlreadyExistsError,
    HandleCloseError,
    HandleClosedError,
    HandleCreationError,
    HandleNotFoundError,
    HandlePool,
    InvalidHandleNameError,
    PoolCloseError,
    PoolError,
    ReadOnlyPool,
)
from .schema import CollectionSpec, SchemaBuilder, SchemaError
from .utils import FoundationError, ProblemDetail

__all__ = [
    "ClientOptions",
    "Collection",
    "CollectionOptions",
    "CollectionSpec",
    "FoundationError",
    "HandleAlreadyExistsError",
    "HandleCloseError",
    "HandleClosedError",
    "HandleCreationError",
    "HandleNotFoundError",
    "HandlePool",
    "InvalidHandleNameError",
    "MilvusClientFactory",
    "MilvusClientHandle",
    "MilvusOperationError",
    "PoolCloseError",
    "PoolConfig",
    "PoolError",
    "PoolSettings",
    "ProblemDetail",
    "ReadOnlyPool",
    "SchemaBuilder",
    "SchemaError",
    "create_pool",
    "get_settings",
    "load_pool_config",
]
