from fastapi import APIRouter

from .comment_webhooks.views import router as webhooks_router
from .diagnostics.views import router as diagnostics_router

# Meta calls the webhook at /webhook; everything else lives under the versioned prefix
webhook_router = APIRouter()
webhook_router.include_router(router=webhooks_router, prefix="/webhook")

router = APIRouter()
router.include_router(router=diagnostics_router, prefix="/diagnostics")
