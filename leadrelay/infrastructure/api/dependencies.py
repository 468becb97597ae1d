"""FastAPI dependency injection — wires the CRM adapter into use cases."""

from __future__ import annotations

from fastapi import Depends

from leadrelay.adapters.clientify.clientify_adapter import ClientifyAdapter
from leadrelay.application.ports.crm_port import CRMPort
from leadrelay.application.use_cases.create_lead import CreateLeadUseCase
from leadrelay.application.use_cases.resolve_owner import OwnerResolver
from leadrelay.config import Settings, settings

# Singleton adapter (one pooled httpx client per process)
_crm_adapter = ClientifyAdapter(settings)


def get_settings() -> Settings:
    return settings


def get_crm() -> CRMPort:
    return _crm_adapter


async def close_crm() -> None:
    await _crm_adapter.aclose()


def get_owner_resolver(
    crm: CRMPort = Depends(get_crm),
    config: Settings = Depends(get_settings),
) -> OwnerResolver:
    return OwnerResolver(
        crm=crm,
        pool=config.agent_pool,
        fields=config.owner_field_keys,
        validate=config.validate_owners,
        verify_delay=config.verify_delay_ms / 1000,
    )


def get_create_lead_uc(
    crm: CRMPort = Depends(get_crm),
    resolver: OwnerResolver = Depends(get_owner_resolver),
    config: Settings = Depends(get_settings),
) -> CreateLeadUseCase:
    return CreateLeadUseCase(
        crm=crm,
        resolver=resolver,
        custom_field_ids=config.custom_field_ids,
        deal_stage_id=config.deal_stage_id,
        deal_amount=config.default_deal_amount,
        assign_contact_owner=config.assign_contact_owner,
    )
