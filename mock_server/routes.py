import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import PlainTextResponse, Response

from .config import ECHO_PATH, ECHO_SKIP_HEADERS, MAX_ECHO_BODY_BYTES
from .models import RouteTable

logger = logging.getLogger(__name__)

echo_router = APIRouter()


# ---------------------------------------------------------------------------
# Configured GET routes
# ---------------------------------------------------------------------------

def _canned_handler(path: str, body: str):
    async def serve_canned_response():
        return PlainTextResponse(body)

    serve_canned_response.__name__ = f"get_{path.strip('/').replace('/', '_') or 'root'}"
    return serve_canned_response


def build_route_router(route_table: RouteTable) -> APIRouter:
    """One GET handler per route table entry, each returning its fixed body."""
    router = APIRouter()
    for path, body in route_table.items():
        router.add_api_route(
            path,
            _canned_handler(path, body),
            methods=["GET"],
            response_class=PlainTextResponse,
        )
        logger.debug(f"Registered GET {path} ({len(body)} chars)")
    return router


# ---------------------------------------------------------------------------
# Echo endpoint
# ---------------------------------------------------------------------------

def _too_large() -> HTTPException:
    return HTTPException(
        status_code=413,
        detail=f"Request body exceeds {MAX_ECHO_BODY_BYTES} bytes",
    )


async def read_echo_body(request: Request) -> bytes:
    """Read the raw request body, rejecting anything over the size cap.

    A declared Content-Length over the cap is refused without reading.
    Chunked bodies are counted as they stream in.
    """
    declared = request.headers.get("content-length")
    if declared is not None and declared.isdigit() and int(declared) > MAX_ECHO_BODY_BYTES:
        raise _too_large()

    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > MAX_ECHO_BODY_BYTES:
            raise _too_large()
    return bytes(body)


@echo_router.post(ECHO_PATH)
async def echo(request: Request, body: bytes = Depends(read_echo_body)):
    """Mirror request headers and body back to the caller."""
    logger.info(f"Echo body: {body!r}")

    response = Response(content=body)
    response.raw_headers.extend(
        (name, value)
        for name, value in request.headers.raw
        if name not in ECHO_SKIP_HEADERS
    )
    return response
