"""Webhook endpoint — ElevenLabs intent events relayed into Clientify."""

from __future__ import annotations

import hmac
import logging

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request
from fastapi.responses import JSONResponse

from leadrelay.application.ports.crm_port import CRMError
from leadrelay.application.use_cases.create_lead import CreateLeadUseCase, LeadResult
from leadrelay.config import Settings
from leadrelay.domain.policies.lead_payload import (
    CREATE_LEAD_INTENT,
    LeadPayloadError,
    lead_from_payload,
    validate_envelope,
    wrap_if_flat,
)
from leadrelay.infrastructure.api.dependencies import get_create_lead_uc, get_settings

logger = logging.getLogger(__name__)

router = APIRouter(tags=["webhook"])


def _is_dry_run(config: Settings, dry_run_param: str | None, dry_run_header: str | None) -> bool:
    return config.dry_run or dry_run_param == "1" or (dry_run_header or "").lower() == "true"


@router.post("/elevenlabs-webhook")
async def elevenlabs_webhook(
    request: Request,
    dry_run_param: str | None = Query(default=None, alias="dryRun"),
    x_elevenlabs_secret: str | None = Header(default=None),
    x_dry_run: str | None = Header(default=None),
    config: Settings = Depends(get_settings),
    create_lead_uc: CreateLeadUseCase = Depends(get_create_lead_uc),
):
    """Create contact, note, custom fields, deal and owner from a lead event."""
    if not config.clientify_token:
        raise HTTPException(status_code=500, detail="CLIENTIFY_TOKEN is not configured")

    if config.elevenlabs_secret and not hmac.compare_digest(
        x_elevenlabs_secret or "", config.elevenlabs_secret
    ):
        raise HTTPException(status_code=401, detail="Invalid signature")

    try:
        body = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="Body is empty or not a JSON object")

    envelope = wrap_if_flat(body)
    if _is_dry_run(config, dry_run_param, x_dry_run):
        return {"ok": True, "mode": "dry-run", "received": envelope}

    try:
        validate_envelope(envelope)
    except LeadPayloadError as e:
        raise HTTPException(status_code=400, detail=str(e))

    intent = envelope["intent"]
    if intent != CREATE_LEAD_INTENT:
        return {"ok": True, "message": f"Intent '{intent}' not implemented"}

    try:
        lead = lead_from_payload(envelope["payload"])
    except LeadPayloadError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        result = await create_lead_uc.execute(lead)
    except CRMError as e:
        logger.error("Clientify integration failed: %s %s %s", e.status, e.url, e.body)
        return JSONResponse(
            status_code=500,
            content={
                "error": "Clientify integration failed",
                "operation": e.operation,
                "status": e.status,
                "url": e.url,
                "details": e.body,
            },
        )

    return {"ok": True, "base": config.clientify_base_url, **_result_to_dict(result)}


def _result_to_dict(r: LeadResult) -> dict:
    return {
        "contactId": r.contact_id,
        "dealId": r.deal_id,
        "assignedOwnerId": r.owner_id,
        "assignedOwnerUrl": r.owner_url,
        "assignedOwnerName": r.owner_name,
        "assignedOwnerEmail": r.owner_email,
        "ownerAssignment": {kind: a.to_dict() for kind, a in r.assignments.items()},
        "warnings": r.warnings,
    }
