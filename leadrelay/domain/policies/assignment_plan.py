"""AssignmentPlanPolicy — the ordered (field, encoding) pairs to try for one candidate."""

from __future__ import annotations

from dataclasses import dataclass

from leadrelay.domain.entities.owner import OwnerCandidate
from leadrelay.domain.value_objects.enums import OwnerEncoding

DEFAULT_OWNER_FIELDS = ("owner", "owner_id", "assigned_to")
ENCODING_ORDER = (OwnerEncoding.ID, OwnerEncoding.URL, OwnerEncoding.EMAIL)


@dataclass(frozen=True)
class PlannedWrite:
    field_key: str
    encoding: OwnerEncoding
    value: object


def user_url(base_url: str, user_id: str) -> str:
    return f"{base_url.rstrip('/')}/users/{user_id}/"


def encode_owner(
    candidate: OwnerCandidate, encoding: OwnerEncoding, base_url: str
) -> object | None:
    """Owner value for one encoding, or None when the candidate lacks the data."""
    if encoding == OwnerEncoding.ID and candidate.user_id:
        return int(candidate.user_id) if candidate.user_id.isdigit() else candidate.user_id
    if encoding == OwnerEncoding.URL and candidate.user_id:
        return user_url(base_url, candidate.user_id)
    if encoding == OwnerEncoding.EMAIL and candidate.email:
        return candidate.email
    return None


def build_plan(
    candidate: OwnerCandidate,
    base_url: str,
    fields: tuple[str, ...] | list[str] = DEFAULT_OWNER_FIELDS,
) -> list[PlannedWrite]:
    """Full field × encoding product, field-major, skipping underivable values."""
    plan = []
    for field_key in fields:
        for encoding in ENCODING_ORDER:
            value = encode_owner(candidate, encoding, base_url)
            if value is not None:
                plan.append(PlannedWrite(field_key, encoding, value))
    return plan
