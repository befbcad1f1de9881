from enum import Enum
import json
import logging
from typing import Any
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ResourceType(str, Enum):
    TASK = "Task"


# Exceptions
class ResourceNotFoundException(Exception):
    def __init__(self, resource_type: ResourceType, identifier: str):
        self.resource_type = resource_type.value
        self.identifier = identifier
        super().__init__(f"{self.resource_type} not found")


class TaskStoreException(Exception):
    def __init__(self, message: str):
        super().__init__(message)


# Exception handlers
def resource_not_found_handler(request: Request, exc: ResourceNotFoundException):
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"message": str(exc)},
    )


def task_store_exception_handler(request: Request, exc: TaskStoreException):
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": str(exc)},
    )


def _decode_body(raw_body: bytes | bytearray | None) -> Any:
    if not raw_body:
        return None
    try:
        return json.loads(raw_body)
    except ValueError:
        return raw_body.decode("utf-8", errors="replace")


def request_log_fields(request: Request) -> dict[str, Any]:
    """Describe a request for structured log entries.

    The body is only included for non-GET requests and is read from the copy
    the access log middleware keeps on ``request.state``, since the receive
    stream has already been consumed by the time a handler runs.
    """
    fields: dict[str, Any] = {
        "method": request.method,
        "path": request.url.path,
        "params": dict(request.path_params),
        "query": dict(request.query_params),
    }
    if request.method != "GET":
        fields["body"] = _decode_body(getattr(request.state, "raw_body", None))
    return fields


def unexpected_exception_handler(request: Request, exc: Exception):
    logger.error(
        str(exc) or exc.__class__.__name__,
        exc_info=exc,
        extra=request_log_fields(request),
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Internal server error"},
    )


def validation_exception_handler(request: Request, exc: RequestValidationError):
    def loc_to_dot_sep(loc: tuple[Any, ...]) -> str:
        """Convert a tuple of location parts to a dot-separated string"""
        path = ""
        for i, x in enumerate(loc):
            if isinstance(x, str):
                if i > 0:
                    path += "."
                path += x
            elif isinstance(x, int):
                path += f"[{x}]"
            else:
                raise TypeError("Unexpected type")
        return path

    errors = [
        {
            "type": error["type"],
            "loc": loc_to_dot_sep(error["loc"]),
            "msg": error["msg"],
        }
        for error in exc.errors()
    ]

    # "body.title" reads better as "title" in the summary message
    summary = "; ".join(
        f"{error['loc'].removeprefix('body.')}: {error['msg']}" for error in errors
    )
    message = f"{ResourceType.TASK.value} validation failed: {summary}"

    logger.warning(message, extra=request_log_fields(request))

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": message, "errors": errors},
    )


# Response definitions for OpenAPI documentation
ResponseDict = dict[int | str, dict[str, Any]]


def resource_not_found_response(
    resource_type: ResourceType,
) -> ResponseDict:
    return {
        404: {
            "description": f"{resource_type.value} not found",
            "content": {
                "application/json": {
                    "example": {"message": f"{resource_type.value} not found"}
                }
            },
        }
    }


internal_error_response: ResponseDict = {
    500: {
        "description": "Internal server error",
        "content": {
            "application/json": {"example": {"message": "Internal server error"}}
        },
    }
}

validation_error_response: ResponseDict = {
    400: {
        "description": "Validation error",
        "content": {
            "application/json": {
                "example": {
                    "message": "Task validation failed: title: Field required",
                    "errors": [
                        {
                            "type": "missing",
                            "loc": "body.title",
                            "msg": "Field required",
                        }
                    ],
                }
            }
        },
    }
}
