"""CreateLeadUseCase — contact → note → custom fields → owner → deal."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from leadrelay.application.ports.crm_port import CRMPort, CRMUnavailable
from leadrelay.application.use_cases.resolve_owner import OwnerResolver
from leadrelay.domain.entities.lead import Lead
from leadrelay.domain.entities.owner import AssignmentResult
from leadrelay.domain.policies.assignment_plan import user_url
from leadrelay.domain.value_objects.enums import EntityKind

logger = logging.getLogger(__name__)


@dataclass
class LeadResult:
    """Summary of one relayed lead."""

    contact_id: str
    deal_id: str | None = None
    owner_id: str | None = None
    owner_email: str | None = None
    owner_name: str | None = None
    owner_url: str | None = None
    assignments: dict[str, AssignmentResult] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)


def custom_field_entries(values: dict[str, object], field_ids: dict[str, str]) -> list[dict]:
    """Pair values with their configured field ids, dropping unset ones."""
    return [
        {"id": field_ids[key], "value": str(value)}
        for key, value in values.items()
        if field_ids.get(key) and value is not None and value != ""
    ]


class CreateLeadUseCase:
    """Orchestrates the create_lead intent.

    Only contact and deal creation are fatal (CRMError propagates). Note,
    custom-field and owner failures are logged and returned as warnings.
    """

    def __init__(
        self,
        crm: CRMPort,
        resolver: OwnerResolver,
        custom_field_ids: dict[str, str] | None = None,
        deal_stage_id: str | None = None,
        deal_amount: float = 0,
        assign_contact_owner: bool = True,
    ):
        self._crm = crm
        self._resolver = resolver
        self._field_ids = custom_field_ids or {}
        self._stage_id = deal_stage_id or None
        self._amount = deal_amount
        self._assign_contact_owner = assign_contact_owner

    async def execute(self, lead: Lead) -> LeadResult:
        # Step 1: contact (fatal)
        contact = await self._crm.create_contact(lead)
        contact_id = str(contact.get("id"))
        result = LeadResult(contact_id=contact_id)

        # Step 2: note
        await self._add_note(contact_id, lead.build_note(), result)

        # Step 3: custom fields
        await self._update_custom_fields(contact_id, lead, result)

        # Step 4: contact owner
        if self._assign_contact_owner:
            assignment = await self._resolver.resolve(EntityKind.CONTACT, contact_id)
            result.assignments[EntityKind.CONTACT.value] = assignment
            self._record_owner(assignment, result, EntityKind.CONTACT)

        # Step 5: deal (fatal) + deal owner, keyed by the contact id so both
        # entities rotate from the same agent
        if self._stage_id:
            deal = await self._crm.create_deal(
                contact_id=contact_id,
                name=lead.deal_name(),
                stage_id=self._stage_id,
                amount=self._amount,
                expected_close_date=lead.cruise_date,
            )
            result.deal_id = str(deal.get("id"))
            assignment = await self._resolver.resolve(
                EntityKind.DEAL, result.deal_id, record_identifier=contact_id
            )
            result.assignments[EntityKind.DEAL.value] = assignment
            self._record_owner(assignment, result, EntityKind.DEAL)
        else:
            logger.warning("CLIENTIFY_DEAL_STAGE_ID not set → no deal created")

        logger.info(
            "Lead relayed: contact=%s deal=%s owner=%s",
            result.contact_id, result.deal_id, result.owner_id or result.owner_email or "(none)",
        )
        return result

    async def _add_note(self, contact_id: str, text: str, result: LeadResult) -> None:
        try:
            response = await self._crm.add_note(contact_id, text)
        except CRMUnavailable as e:
            logger.warning("Note for contact %s not added: %s", contact_id, e)
            result.warnings.append(f"note: {e}")
            return
        if not response.ok:
            logger.warning("Note for contact %s rejected: %d %s", contact_id, response.status, response.body)
            result.warnings.append(f"note: HTTP {response.status}")

    async def _update_custom_fields(self, contact_id: str, lead: Lead, result: LeadResult) -> None:
        entries = custom_field_entries(lead.custom_field_values(), self._field_ids)
        if not entries:
            return
        try:
            response = await self._crm.update_custom_fields(contact_id, entries)
        except CRMUnavailable as e:
            logger.warning("Custom fields for contact %s not updated: %s", contact_id, e)
            result.warnings.append(f"custom_fields: {e}")
            return
        if not response.ok:
            logger.warning(
                "Custom fields for contact %s rejected: %d %s", contact_id, response.status, response.body
            )
            result.warnings.append(f"custom_fields: HTTP {response.status}")

    def _record_owner(self, assignment: AssignmentResult, result: LeadResult, kind: EntityKind) -> None:
        if not assignment.success:
            if assignment.skipped_reason != "empty agent pool":
                result.warnings.append(f"owner[{kind.value}]: not verified")
            return
        candidate = assignment.candidate
        owner = assignment.owner
        result.owner_id = candidate.user_id or (owner.id if owner else None)
        result.owner_email = candidate.email or (owner.email if owner else None)
        result.owner_name = candidate.name or (owner.name if owner else None)
        result.owner_url = user_url(self._crm.base_url, result.owner_id) if result.owner_id else None
