"""Health check endpoint."""

from fastapi import APIRouter, Depends

from leadrelay.config import Settings
from leadrelay.infrastructure.api.dependencies import get_settings

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(config: Settings = Depends(get_settings)):
    """Report whether the CRM connection is configured."""
    token_status = "configured" if config.clientify_token else "missing"
    return {
        "status": "ok" if config.clientify_token else "degraded",
        "clientify_token": token_status,
        "clientify_base_url": config.clientify_base_url,
        "agent_pool_size": len(config.agent_pool),
        "service": "Lead Relay - ElevenLabs to Clientify",
    }
