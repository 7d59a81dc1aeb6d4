"""
Request body ceiling enforced on the ASGI byte stream.

The Content-Length header is only a fast path: chunked bodies carry no
length, so ``receive`` is wrapped and the bytes are counted as they arrive.
"""

from fastapi import HTTPException
from fastapi.responses import JSONResponse
from starlette.datastructures import Headers
from starlette.types import ASGIApp, Message, Receive, Scope, Send

# Room for boundaries and part headers around a full-size file.
MULTIPART_OVERHEAD_BYTES = 64 * 1024


class BodySizeLimitMiddleware:
    def __init__(self, app: ASGIApp, max_body_bytes: int):
        self.app = app
        self.max_body_bytes = max_body_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = Headers(scope=scope)
        if headers.get("content-type", "").startswith("multipart/form-data"):
            limit = self.max_body_bytes + MULTIPART_OVERHEAD_BYTES
            message = "File too large"
        else:
            limit = self.max_body_bytes
            message = "Request body too large"

        content_length = headers.get("content-length")
        if content_length is not None:
            try:
                declared = int(content_length)
            except ValueError:
                declared = None
            if declared is None:
                response = JSONResponse(status_code=400, content={"error": "Invalid request body"})
                await response(scope, receive, send)
                return
            if declared > limit:
                response = JSONResponse(status_code=400, content={"error": message})
                await response(scope, receive, send)
                return

        received = 0

        async def limited_receive() -> Message:
            nonlocal received
            msg = await receive()
            if msg["type"] == "http.request":
                received += len(msg.get("body", b""))
                if received > limit:
                    # Raised inside the route, so the app's HTTPException handler renders it.
                    raise HTTPException(status_code=400, detail=message)
            return msg

        await self.app(scope, limited_receive, send)
