"""Unit tests for the pooled Milvus client handle."""

from __future__ import annotations

import pytest
from pymilvus import DataType
from pymilvus.exceptions import MilvusException

from milvus_pool.client import MilvusClientHandle, MilvusOperationError
from milvus_pool.config import ClientOptions
from milvus_pool.pool import HandleClosedError
from milvus_pool.schema import SchemaBuilder, id_field, vector_field


def _handle(fake_client_cls, options: ClientOptions) -> tuple[MilvusClientHandle, object]:
    client = fake_client_cls()
    return MilvusClientHandle(client, options), client


def test_operations_forward_with_operation_timeout(fake_client_cls, client_options) -> None:
    handle, client = _handle(fake_client_cls, client_options)
    client.responses["list_collections"] = ["articles", "images"]
    client.responses["has_collection"] = True

    assert handle.list_collections() == ["articles", "images"]
    assert handle.has_collection("articles") is True
    handle.drop_collection("images")

    assert client.calls_to("has_collection") == [{"collection_name": "articles", "timeout": 12.5}]
    assert client.calls_to("drop_collection") == [{"collection_name": "images", "timeout": 12.5}]


def test_use_database_has_no_timeout(fake_client_cls, client_options) -> None:
    handle, client = _handle(fake_client_cls, client_options)
    handle.use_database("analytics")
    assert client.calls_to("using_database") == [{"db_name": "analytics"}]


def test_database_operations(fake_client_cls, client_options) -> None:
    handle, client = _handle(fake_client_cls, client_options)
    handle.create_database("analytics", {"database.replica.number": 1})
    handle.drop_database("scratch")
    assert handle.list_databases() == ["default"]
    assert client.calls_to("create_database")[0]["properties"] == {"database.replica.number": 1}
    assert client.calls_to("drop_database")[0]["db_name"] == "scratch"


def test_create_collection_passes_schema_and_shards(fake_client_cls, client_options) -> None:
    handle, client = _handle(fake_client_cls, client_options)
    spec = (
        SchemaBuilder("articles")
        .add_field(id_field("id"))
        .add_field(vector_field("embedding", 8))
        .build()
    )
    handle.create_collection(spec, shards_num=2, consistency_level="Strong")

    call = client.calls_to("create_collection")[0]
    assert call["collection_name"] == "articles"
    assert call["schema"] is spec.schema
    assert call["num_shards"] == 2
    assert call["consistency_level"] == "Strong"


def test_partition_and_alias_operations(fake_client_cls, client_options) -> None:
    handle, client = _handle(fake_client_cls, client_options)
    handle.create_partition("articles", "2024")
    handle.load_partitions("articles", ("2024",))
    handle.release_partitions("articles", ["2024"])
    assert handle.list_partitions("articles") == ["_default"]
    assert handle.has_partition("articles", "2024") is False
    handle.drop_partition("articles", "2024")
    handle.create_alias("articles", "live")
    handle.alter_alias("articles_v2", "live")
    handle.drop_alias("live")

    assert client.calls_to("load_partitions")[0]["partition_names"] == ["2024"]
    assert client.calls_to("alter_alias")[0] == {
        "collection_name": "articles_v2",
        "alias": "live",
        "timeout": 12.5,
    }
    assert client.calls_to("drop_alias")[0]["alias"] == "live"


def test_create_index_builds_index_params(fake_client_cls, client_options) -> None:
    handle, client = _handle(fake_client_cls, client_options)
    handle.create_index(
        "articles",
        "embedding",
        index_type="HNSW",
        metric_type="L2",
        params={"M": 16, "efConstruction": 200},
    )
    call = client.calls_to("create_index")[0]
    assert call["collection_name"] == "articles"
    assert call["index_params"] is not None
    handle.drop_index("articles", "embedding")
    assert client.calls_to("drop_index")[0]["index_name"] == "embedding"


def test_data_operations(fake_client_cls, client_options) -> None:
    handle, client = _handle(fake_client_cls, client_options)
    client.responses["insert"] = {"insert_count": 2, "ids": [1, 2]}
    client.responses["search"] = [[{"id": 1, "distance": 0.1}]]
    client.responses["query"] = [{"id": 1}]
    client.responses["compact"] = 42

    rows = [{"id": 1, "embedding": [0.0] * 8}, {"id": 2, "embedding": [1.0] * 8}]
    assert handle.insert("articles", rows, partition_name="2024") == {
        "insert_count": 2,
        "ids": [1, 2],
    }
    hits = handle.search(
        "articles",
        [[0.0] * 8],
        anns_field="embedding",
        metric_type="L2",
        limit=5,
        params={"ef": 64},
    )
    assert hits == [[{"id": 1, "distance": 0.1}]]
    assert handle.query("articles", "id in [1]", output_fields=["id"]) == [{"id": 1}]
    assert handle.delete("articles", "id in [2]")["delete_count"] == 0
    assert handle.compact("articles") == 42

    search = client.calls_to("search")[0]
    assert search["search_params"] == {"metric_type": "L2", "params": {"ef": 64}}
    assert search["limit"] == 5
    assert client.calls_to("insert")[0]["partition_name"] == "2024"
    assert "partition_name" not in client.calls_to("delete")[0]


def test_closed_handle_rejects_operations(fake_client_cls, client_options) -> None:
    handle, client = _handle(fake_client_cls, client_options)
    handle.close()
    handle.close()

    assert handle.closed
    assert client.close_calls == 1
    assert handle.raw_client is None
    with pytest.raises(HandleClosedError) as excinfo:
        handle.list_collections()
    assert excinfo.value.problem.status == 410
    assert client.calls == []


def test_raw_client_exposed_while_open(fake_client_cls, client_options) -> None:
    handle, client = _handle(fake_client_cls, client_options)
    assert handle.raw_client is client


def test_driver_errors_are_translated(fake_client_cls, client_options) -> None:
    handle, client = _handle(fake_client_cls, client_options)
    client.responses["drop_collection"] = MilvusException(code=100, message="collection not found")

    with pytest.raises(MilvusOperationError) as excinfo:
        handle.drop_collection("missing")

    assert excinfo.value.operation == "drop_collection"
    assert excinfo.value.code == 100
    assert isinstance(excinfo.value.__cause__, MilvusException)
    assert "collection not found" in str(excinfo.value)


def test_rate_limited_calls_are_retried(fake_client_cls) -> None:
    options = ClientOptions(max_retry=2, max_retry_backoff=0.0)
    handle, client = _handle(fake_client_cls, options)
    client.responses["has_collection"] = [
        MilvusException(code=8, message="rate limit exceeded"),
        MilvusException(code=8, message="rate limit exceeded"),
        True,
    ]

    assert handle.has_collection("articles") is True
    assert len(client.calls_to("has_collection")) == 3


def test_retry_gives_up_after_max_retry(fake_client_cls) -> None:
    options = ClientOptions(max_retry=1, max_retry_backoff=0.0)
    handle, client = _handle(fake_client_cls, options)
    client.responses["has_collection"] = [
        MilvusException(code=8, message="rate limit exceeded"),
        MilvusException(code=8, message="rate limit exceeded"),
        True,
    ]

    with pytest.raises(MilvusOperationError) as excinfo:
        handle.has_collection("articles")
    assert excinfo.value.code == 8
    assert len(client.calls_to("has_collection")) == 2


def test_other_errors_are_not_retried(fake_client_cls) -> None:
    options = ClientOptions(max_retry=3)
    handle, client = _handle(fake_client_cls, options)
    client.responses["has_collection"] = [MilvusException(code=1, message="unexpected"), True]

    with pytest.raises(MilvusOperationError):
        handle.has_collection("articles")
    assert len(client.calls_to("has_collection")) == 1


def test_no_retry_by_default(fake_client_cls, client_options) -> None:
    handle, client = _handle(fake_client_cls, client_options)
    client.responses["has_collection"] = [MilvusException(code=8, message="rate limit"), True]

    with pytest.raises(MilvusOperationError):
        handle.has_collection("articles")
    assert len(client.calls_to("has_collection")) == 1


def test_binary_vector_schema_accepted(fake_client_cls, client_options) -> None:
    handle, client = _handle(fake_client_cls, client_options)
    spec = (
        SchemaBuilder("fingerprints")
        .add_field(id_field("pk", DataType.VARCHAR, max_length=64))
        .add_field(vector_field("bits", 64, DataType.BINARY_VECTOR))
        .build()
    )
    handle.create_collection(spec)
    assert client.calls_to("create_collection")[0]["num_shards"] == 1


def test_retry_policy_counts_retries_after_first_attempt(fake_client_cls) -> None:
    handle, _ = _handle(fake_client_cls, ClientOptions(max_retry=2))
    retrying = handle._retrying()
    assert retrying.stop.max_attempt_number == 3
    assert retrying.wait.max == 3.0
