"""OwnerResolver — pick, assign and verify the owner of a CRM entity."""

from __future__ import annotations

import asyncio
import logging

from leadrelay.application.ports.crm_port import CRMPort, CRMUnavailable
from leadrelay.domain.entities.owner import (
    AssignmentAttempt,
    AssignmentResult,
    OwnerCandidate,
    OwnerRecord,
)
from leadrelay.domain.policies.assignment_plan import DEFAULT_OWNER_FIELDS, PlannedWrite, build_plan
from leadrelay.domain.policies.owner_parsing import parse_owner, parse_user
from leadrelay.domain.policies.owner_selection import build_candidates
from leadrelay.domain.value_objects.enums import AttemptState, EntityKind

logger = logging.getLogger(__name__)

DETAIL_LIMIT = 300


def _detail(body: object) -> str:
    return str(body)[:DETAIL_LIMIT]


class OwnerResolver:
    """Assigns an owner from the agent pool and confirms it by reading back.

    Candidates are tried in rotation order starting at the hash-selected
    agent. For each candidate every (field, encoding) pair is written in
    turn; a 2xx write only counts once a re-read of the entity shows the
    candidate as owner. Failures never raise: they end up in the returned
    AssignmentResult.
    """

    def __init__(
        self,
        crm: CRMPort,
        pool: list[str],
        fields: tuple[str, ...] | list[str] = DEFAULT_OWNER_FIELDS,
        validate: bool = True,
        verify_delay: float = 0.25,
    ):
        self._crm = crm
        self._pool = list(pool)
        self._fields = tuple(fields)
        self._validate = validate
        self._verify_delay = verify_delay

    async def resolve(
        self,
        kind: EntityKind,
        entity_id: str,
        record_identifier: object | None = None,
    ) -> AssignmentResult:
        identifier = entity_id if record_identifier is None else record_identifier
        candidates = build_candidates(identifier, self._pool)
        result = AssignmentResult()

        if not candidates:
            result.skipped_reason = "empty agent pool"
            logger.info("No agent pool configured → %s %s left without owner", kind.value, entity_id)
            return result

        result.intended = candidates[0].identifier
        any_valid = False

        for candidate in candidates:
            if self._validate and not await self._validate_candidate(candidate):
                logger.warning("Owner candidate %s failed validation, rotating", candidate.identifier)
                continue
            any_valid = True

            if await self._assign(kind, entity_id, candidate, result):
                logger.info(
                    "%s %s → owner %s via %s/%s",
                    kind.value, entity_id, candidate.identifier,
                    result.winning_field[0], result.winning_field[1].value,
                )
                return result

        result.state = AttemptState.EXHAUSTED
        if not any_valid:
            result.skipped_reason = "no valid candidate"
        logger.warning(
            "Owner assignment for %s %s exhausted after %d attempts",
            kind.value, entity_id, len(result.attempts),
        )
        return result

    async def _validate_candidate(self, candidate: OwnerCandidate) -> bool:
        """Look the candidate up; email-only candidates need no lookup."""
        if not candidate.user_id:
            return bool(candidate.email)
        try:
            response = await self._crm.get_user(candidate.user_id)
        except CRMUnavailable:
            return False
        if not response.ok:
            return False

        user = parse_user(response.body, candidate.user_id)
        if user:
            candidate.email = candidate.email or (user.email.lower() if user.email else None)
            candidate.name = candidate.name or user.name
        return True

    async def _assign(
        self,
        kind: EntityKind,
        entity_id: str,
        candidate: OwnerCandidate,
        result: AssignmentResult,
    ) -> bool:
        for planned in build_plan(candidate, self._crm.base_url, self._fields):
            attempt = AssignmentAttempt(
                candidate=candidate.identifier,
                field_key=planned.field_key,
                encoding=planned.encoding,
            )
            result.attempts.append(attempt)
            result.state = AttemptState.ATTEMPTED

            owner = await self._write_and_read(kind, entity_id, planned, attempt)
            if owner is None:
                continue
            if candidate.matches(owner):
                attempt.state = AttemptState.VERIFIED
                result.success = True
                result.state = AttemptState.VERIFIED
                result.winning_field = (planned.field_key, planned.encoding)
                result.candidate = candidate
                result.owner = owner
                return True

            attempt.detail = f"unverified: owner reads back as id={owner.id} email={owner.email}"
            logger.debug(
                "%s %s: %s/%s accepted but not verified",
                kind.value, entity_id, planned.field_key, planned.encoding.value,
            )
        return False

    async def _write_and_read(
        self,
        kind: EntityKind,
        entity_id: str,
        planned: PlannedWrite,
        attempt: AssignmentAttempt,
    ) -> OwnerRecord | None:
        """One PATCH and, when accepted, the read-back owner."""
        attempt.state = AttemptState.ATTEMPTED
        try:
            response = await self._crm.update_entity(kind, entity_id, {planned.field_key: planned.value})
        except CRMUnavailable as e:
            attempt.detail = _detail(e)
            return None

        attempt.status = response.status
        if not response.ok:
            attempt.detail = _detail(response.body)
            return None

        # Give the CRM a moment before reading back
        await asyncio.sleep(self._verify_delay)
        try:
            current = await self._crm.get_entity(kind, entity_id)
        except CRMUnavailable as e:
            attempt.detail = f"read-back failed: {_detail(e)}"
            return None
        if not current.ok:
            attempt.detail = f"read-back returned {current.status}"
            return None
        return parse_owner(current.body)
