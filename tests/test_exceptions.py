import json

import pytest
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from app.core.exceptions import (
    pydantic_validation_exception_handler,
    request_validation_exception_handler,
    validate_body,
)
from app.schemas.task import TaskCreateTarget, TaskStatusUpdate


def make_request(path: str = "/api/v1/tasks/") -> Request:
    return Request(
        {
            "type": "http",
            "method": "PATCH",
            "path": path,
            "headers": [],
            "query_string": b"",
        }
    )


class TestValidateBody:
    """Bodies validated inside a route."""

    def test_returns_model(self):
        target = validate_body(
            TaskCreateTarget,
            {"project_id": "00000000-0000-0000-0000-000000000001", "title": ""},
        )
        assert str(target.project_id) == "00000000-0000-0000-0000-000000000001"

    @pytest.mark.asyncio
    async def test_failure_renders_as_request_error(self):
        with pytest.raises(RequestValidationError) as exc_info:
            validate_body(TaskCreateTarget, {"project_id": "nope"})

        response = await request_validation_exception_handler(
            make_request(), exc_info.value
        )

        body = json.loads(response.body)
        assert response.status_code == 422
        assert body["code"] == "validation_error"
        assert body["details"]["errors"][0]["field"] == "project_id"


class TestServerSideValidation:
    """Models the server fails to build are not the client's fault."""

    @pytest.mark.asyncio
    async def test_is_internal_error(self):
        with pytest.raises(ValidationError) as exc_info:
            TaskStatusUpdate.model_validate({"status": "archived"})

        response = await pydantic_validation_exception_handler(
            make_request(), exc_info.value
        )

        body = json.loads(response.body)
        assert response.status_code == 500
        assert body["code"] == "internal_server_error"
        assert body["details"] == {"type": "ValidationError"}
