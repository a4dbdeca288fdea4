from __future__ import annotations

from milvus_pool.client import MilvusOperationError
from milvus_pool.pool import HandleNotFoundError, PoolCloseError
from milvus_pool.utils import FoundationError, ProblemDetail


def test_problem_detail_drops_empty_fields() -> None:
    problem = ProblemDetail(title="Handle not found", status=404)
    assert problem.to_response() == {
        "title": "Handle not found",
        "status": 404,
        "type": "about:blank",
    }


def test_foundation_error_carries_problem() -> None:
    error = FoundationError("Broken", status=503, detail="server offline", extra={"retry": True})
    assert str(error) == "Broken: server offline"
    assert error.problem.model_dump()["extra"] == {"retry": True}


def test_pool_errors_serialise_name() -> None:
    payload = HandleNotFoundError("analytics").problem.to_response()
    assert payload["status"] == 404
    assert payload["extra"] == {"name": "analytics"}


def test_pool_close_error_lists_failures_sorted() -> None:
    error = PoolCloseError({"b": OSError("reset"), "a": TimeoutError("slow")})
    assert error.problem.detail == "a: slow; b: reset"
    assert error.problem.extra["names"] == ["a", "b"]


def test_operation_error_without_driver_code() -> None:
    error = MilvusOperationError("search", ValueError("bad vector"))
    assert error.code is None
    assert error.problem.detail == "search failed: bad vector"
