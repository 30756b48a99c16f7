"""v1 API routes.

Routes are not nested under a workspace path: list endpoints take an
optional workspace_id filter, and post endpoints resolve the workspace from
the post itself.
"""

from api.routes.v1.me import router as me_router
from api.routes.v1.workspaces import router as workspaces_router
from api.routes.v1.content import router as content_router
from api.routes.v1.approvals import router as approvals_router
from api.routes.v1.audit import router as audit_router

__all__ = [
    "me_router",
    "workspaces_router",
    "content_router",
    "approvals_router",
    "audit_router",
]
