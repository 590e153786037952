"""
AI assistant endpoint.

POST /api/ai: Relay the JSON body to the AI workflow webhook
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import JSONResponse

from app.core.auth import AuthenticatedIdentity, require_identity
from app.services.ai_proxy import (
    AIWebhookProxy,
    WebhookNotConfiguredError,
    WebhookStatusError,
    WebhookUnavailableError,
)

router = APIRouter()


def get_ai_proxy(request: Request) -> AIWebhookProxy:
    return request.app.state.ai_proxy


@router.post("")
async def relay_to_assistant(
    payload: Any = Body(...),
    identity: AuthenticatedIdentity = Depends(require_identity),
    proxy: AIWebhookProxy = Depends(get_ai_proxy),
):
    """Forward the chat payload and return the webhook's JSON answer."""
    try:
        data = await proxy.forward(payload)
    except WebhookNotConfiguredError:
        return JSONResponse(status_code=500, content={"error": "AI webhook URL is not configured"})
    except WebhookStatusError as exc:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": f"AI webhook error: {exc.status_code}"},
        )
    except WebhookUnavailableError:
        return JSONResponse(status_code=500, content={"error": "Could not reach the AI assistant"})
    return JSONResponse(content=data)
