"""Factory that connects Milvus clients for the handle pool."""

from __future__ import annotations

from typing import Any

import structlog
from pymilvus import MilvusClient

from milvus_pool.config.client import ClientOptions
from milvus_pool.pool.registry import HandlePool

from .handle import MilvusClientHandle

logger = structlog.get_logger(__name__)


class MilvusClientFactory:
    """Callable turning :class:`ClientOptions` into a connected handle.

    Args:
        client_cls: Driver client class; override to inject a test double.
    """

    def __init__(self, client_cls: type[Any] = MilvusClient) -> None:
        self._client_cls = client_cls

    def client_kwargs(self, options: ClientOptions) -> dict[str, Any]:
        """Map connection options onto driver constructor arguments."""
        kwargs: dict[str, Any] = {
            "uri": options.uri,
            "timeout": options.connect_timeout,
        }
        if options.api_key is not None:
            kwargs["token"] = options.token
        elif options.username:
            kwargs["user"] = options.username
            kwargs["password"] = options.password.get_secret_value()
        if options.db_name:
            kwargs["db_name"] = options.db_name
        if options.enable_tls:
            kwargs["secure"] = True
        grpc_options = options.grpc_options()
        if grpc_options:
            kwargs["grpc_options"] = grpc_options
        return kwargs

    def __call__(self, options: ClientOptions) -> MilvusClientHandle:
        client = self._client_cls(**self.client_kwargs(options))
        logger.info(
            "milvus.client.connected",
            address=options.address,
            db_name=options.db_name or "default",
        )
        return MilvusClientHandle(client, options)


def create_pool(
    *,
    name: str = "milvus",
    client_cls: type[Any] = MilvusClient,
    metrics_enabled: bool = True,
) -> HandlePool[ClientOptions, MilvusClientHandle]:
    """Return a new, empty pool of Milvus client handles."""
    return HandlePool(
        MilvusClientFactory(client_cls),
        name=name,
        metrics_enabled=metrics_enabled,
    )


__all__ = ["MilvusClientFactory", "create_pool"]
