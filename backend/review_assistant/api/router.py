"""Central API router that aggregates all route modules."""

from fastapi import APIRouter, Depends

from review_assistant.api.chat import router as chat_router
from review_assistant.api.middleware import require_access_token

api_router = APIRouter(dependencies=[Depends(require_access_token)])

api_router.include_router(chat_router, prefix="/chat", tags=["chat"])
