"""FastAPI surface for the post review core."""

import logging
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from api.error_handlers import register_error_handlers
from api.routes import health
from api.routes.v1 import (
    approvals_router,
    audit_router,
    content_router,
    me_router,
    workspaces_router,
)
from studio.logging import bind_context, clear_context

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)


app = FastAPI(
    title="Studio Review API",
    description="Workspace-scoped post review and approval",
    version="1.0.0",
)

# CORS for the React dev server
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://127.0.0.1:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_context(request: Request, call_next):
    """Bind a request id to every log line written while handling a request."""
    request_id = request.headers.get("X-Request-ID") or str(uuid4())
    clear_context()
    bind_context(request_id=request_id)
    try:
        response = await call_next(request)
    finally:
        clear_context()
    response.headers["X-Request-ID"] = request_id
    return response


# Register global error handlers
register_error_handlers(app)

app.include_router(me_router, prefix="/api", tags=["me"])
app.include_router(workspaces_router, prefix="/api", tags=["workspaces"])
app.include_router(content_router, prefix="/api", tags=["content"])
app.include_router(approvals_router, prefix="/api", tags=["approvals"])
app.include_router(audit_router, prefix="/api", tags=["audit"])

# Health check (no auth required)
app.include_router(health.router, prefix="/api", tags=["health"])
