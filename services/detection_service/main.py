import os

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from starlette.exceptions import HTTPException as StarletteHTTPException

from .src.routers import detect
from .src.config import settings
from .src.exceptions import MethodNotAllowed
from .otel import init_tracing

DETECT_PREFIX = "/api"

app = FastAPI(title="Voice Detection API", version="1.0.0")
app.include_router(detect.router, prefix=DETECT_PREFIX)

@app.exception_handler(StarletteHTTPException)
async def method_not_allowed_handler(request: Request, exc: StarletteHTTPException):
    # Only the detect route answers with the POST-only error body
    if exc.status_code == 405 and request.url.path == f"{DETECT_PREFIX}{detect.DETECT_PATH}":
        resp = detect.error_response(MethodNotAllowed())
        resp.headers.update(exc.headers or {})
        return resp
    return await http_exception_handler(request, exc)

tracer = init_tracing(app, service_name=settings.service_name, service_version="v1")

@app.get("/health")
def health():
    return {"status": "ok", "service": settings.service_name}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
