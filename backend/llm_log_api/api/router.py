"""Main router for API v1, combining all v1 endpoints."""

from fastapi import APIRouter

from llm_log_api.api.routes import llm_logs


router = APIRouter(prefix="/api/v1")

router.include_router(llm_logs.router)
