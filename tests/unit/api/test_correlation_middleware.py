"""Unit tests for the correlation ID middleware."""

import logging
import uuid
from types import SimpleNamespace

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from starlette.requests import Request

from refunds.utils.logging import get_correlation_id
from refunds_api.middleware.correlation import (
    CORRELATION_ID_HEADER,
    CorrelationIdMiddleware,
    lambda_request_id,
)


@pytest.fixture
def client() -> TestClient:
    app = FastAPI()
    app.add_middleware(CorrelationIdMiddleware)

    @app.get("/whoami")
    def whoami() -> dict:
        return {"correlationId": get_correlation_id()}

    return TestClient(app)


def make_request(aws_context=None) -> Request:
    scope = {"type": "http", "method": "GET", "path": "/", "headers": []}
    if aws_context is not None:
        scope["aws.context"] = aws_context
    return Request(scope)


class TestCorrelationIdMiddleware:
    """Tests for correlation ID binding and echo."""

    def test_caller_header_is_used_and_echoed(self, client: TestClient) -> None:
        response = client.get("/whoami", headers={CORRELATION_ID_HEADER: "corr-abc-123"})

        assert response.json() == {"correlationId": "corr-abc-123"}
        assert response.headers[CORRELATION_ID_HEADER] == "corr-abc-123"

    def test_generates_id_without_header(self, client: TestClient) -> None:
        response = client.get("/whoami")

        generated = response.headers[CORRELATION_ID_HEADER]
        assert response.json() == {"correlationId": generated}
        uuid.UUID(generated)

    def test_id_cleared_after_request(self, client: TestClient) -> None:
        client.get("/whoami", headers={CORRELATION_ID_HEADER: "corr-abc-123"})

        assert get_correlation_id() is None

    def test_logs_request_outcome(self, client: TestClient, caplog) -> None:
        with caplog.at_level(logging.INFO, logger="refunds_api.middleware.correlation"):
            client.get("/whoami")

        assert "GET /whoami -> 200" in caplog.text


class TestLambdaRequestId:
    """Tests for the Mangum scope fallback."""

    def test_reads_aws_request_id(self) -> None:
        request = make_request(SimpleNamespace(aws_request_id="lambda-req-42"))

        assert lambda_request_id(request) == "lambda-req-42"

    def test_none_outside_lambda(self) -> None:
        assert lambda_request_id(make_request()) is None
