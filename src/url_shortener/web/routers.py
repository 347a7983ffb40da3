import uuid

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

APP_VERSION = "1.0.0"

router = APIRouter()


def _request_id(request: Request) -> str:
    value = request.headers.get("X-Request-Id")
    return value or str(uuid.uuid4())[:8]


def error_response(status_code: int, message: str, request: Request) -> JSONResponse:
    """Generate unified error response."""
    request_id = _request_id(request)
    response = JSONResponse(
        status_code=status_code,
        content={
            "error": message,
            "request_id": request_id,
            "path": str(request.url.path),
        },
    )
    response.headers["X-Request-Id"] = request_id
    return response


@router.get("/healthz")
async def health_check():
    return {"status": "ok", "version": APP_VERSION}


@router.api_route("/{full_path:path}", methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"])
async def not_found(request: Request):
    return error_response(404, "Not Found", request)
