"""Meta webhook endpoints: subscription handshake and event intake."""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError

from core.config import settings
from core.container import Container, get_container
from core.logging_config import trace_id_ctx
from core.schemas.webhook import WebhookPayload

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Webhooks"])

EVENT_RECEIVED = "EVENT_RECEIVED"


@router.get("")
@router.get("/")
async def webhook_verification(request: Request):
    """Handle the hub.mode / hub.verify_token / hub.challenge subscription handshake."""
    hub_mode = request.query_params.get("hub.mode")
    hub_verify_token = request.query_params.get("hub.verify_token")
    hub_challenge = request.query_params.get("hub.challenge", "")

    if not hub_mode or not hub_verify_token:
        logger.warning("Webhook verification failed - missing hub.mode or hub.verify_token")
        raise HTTPException(status_code=400, detail="Missing required parameters")

    if hub_mode != "subscribe" or hub_verify_token != settings.meta.verify_token:
        logger.warning(f"Webhook verification failed - invalid mode or token | mode={hub_mode}")
        raise HTTPException(status_code=403, detail="Invalid verify token")

    logger.info("Webhook verification successful")
    return PlainTextResponse(hub_challenge)


@router.post("")
@router.post("/")
async def process_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    container: Container = Depends(get_container),
):
    """Acknowledge a webhook delivery immediately; mention processing runs after the response."""
    if incoming_trace := request.headers.get("X-Trace-Id"):
        trace_id_ctx.set(incoming_trace)

    body_bytes = getattr(request.state, "body", None) or await request.body()
    try:
        payload = WebhookPayload.model_validate_json(body_bytes)
    except ValidationError as e:
        logger.warning(f"Invalid webhook payload | error_count={e.error_count()}")
        logger.debug(f"Raw payload: {body_bytes[:2000]!r}")
        raise HTTPException(status_code=400, detail="Invalid payload")

    logger.info(f"Webhook received | object={payload.object} | entries={len(payload.entry)}")

    use_case = container.process_webhook_event_use_case()
    background_tasks.add_task(use_case.execute, payload)

    return PlainTextResponse(EVENT_RECEIVED)
