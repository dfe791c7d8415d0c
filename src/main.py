import os
import hashlib
import hmac
import logging

import uvicorn

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from core.config import settings
from core.container import get_container
from core.logging_config import configure_logging
from api_v1 import router as router_v1, webhook_router

configure_logging()

logger = logging.getLogger(__name__)

WEBHOOK_PATH = "/webhook"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    registry = get_container().account_registry()
    logger.info(
        f"Starting mention notifier | pages={len(registry.accounts)} | "
        f"monitored_usernames={list(registry.monitored_usernames)} | "
        f"signature_check={'on' if settings.meta.app_secret else 'off'}"
    )
    yield
    logger.info("Shutting down mention notifier")


app = FastAPI(lifespan=lifespan)
app.include_router(router=webhook_router)
app.include_router(router=router_v1, prefix=settings.api_v1_prefix)


def _expected_signature(body: bytes, signature_256: str | None) -> str:
    # Meta prefers X-Hub-Signature-256 (SHA256); X-Hub-Signature (SHA1) is the legacy header
    if signature_256:
        digest = hmac.new(settings.meta.app_secret.encode(), body, hashlib.sha256).hexdigest()
        return "sha256=" + digest
    digest = hmac.new(settings.meta.app_secret.encode(), body, hashlib.sha1).hexdigest()
    return "sha1=" + digest


@app.middleware("http")
async def verify_webhook_signature(request: Request, call_next):
    if request.method != "POST" or request.url.path.rstrip("/") != WEBHOOK_PATH:
        return await call_next(request)

    # Without an app secret there is nothing to verify against
    if not settings.meta.app_secret:
        return await call_next(request)

    signature_256 = request.headers.get("X-Hub-Signature-256")
    signature = signature_256 or request.headers.get("X-Hub-Signature")
    body = await request.body()

    if signature:
        if not hmac.compare_digest(signature, _expected_signature(body, signature_256)):
            logger.error(
                f"Webhook signature verification failed | body_length={len(body)} | "
                f"header={'X-Hub-Signature-256' if signature_256 else 'X-Hub-Signature'}"
            )
            return JSONResponse(status_code=401, content={"detail": "Invalid signature"})
        logger.debug(f"Webhook signature verified | type={'SHA256' if signature_256 else 'SHA1'}")
    elif settings.development_mode:
        logger.warning("DEVELOPMENT MODE: Allowing webhook request without signature header")
    else:
        logger.error("Webhook request received without signature header - blocking request")
        return JSONResponse(status_code=401, content={"detail": "Missing signature header"})

    request.state.body = body
    return await call_next(request)


if __name__ == "__main__":
    port = int(os.getenv("PORT", "3000"))
    host = os.getenv("HOST", "0.0.0.0")

    logger.info(f"Starting mention notifier server | host={host} | port={port} | environment={settings.environment}")

    uvicorn.run("main:app", host=host, port=port, reload=settings.development_mode)
