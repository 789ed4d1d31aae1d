"""API v1 router and endpoint organization."""

from fastapi import APIRouter

from proofpin.api.v1.endpoints import comments, files, projects, public

router = APIRouter(prefix="/api/v1", tags=["v1"])

# Include domain-specific routers
router.include_router(projects.router, prefix="/projects", tags=["Projects"])
router.include_router(files.router, tags=["Files"])
router.include_router(comments.router, tags=["Comments"])
router.include_router(public.router, prefix="/public", tags=["Public"])
