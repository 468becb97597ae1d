"""OwnerParsingPolicy — normalizes the owner found in a CRM entity response.

The CRM reports an owner in several shapes depending on account setup:

  * a numeric id field (``owner_id: 42``)
  * a resource URL (``owner: ".../users/42/"``)
  * a bare numeric string (``owner: "42"``)
  * an email (``owner: "ana@example.com"``)
  * a nested object (``owner: {"id": 42, "email": ..., "url": ...}``)

Fields are read in a fixed order. The first match decides the shape and
each member; later matches only fill members still missing.
"""

from __future__ import annotations

import re
from typing import Any, Callable

from leadrelay.domain.entities.owner import OwnerRecord
from leadrelay.domain.value_objects.enums import OwnerShape

ID_FIELDS = ("owner_id", "user_id", "assigned_to_id")
GENERIC_FIELDS = ("owner", "user", "assigned_to", "owner_email")
NAME_FIELDS = ("owner_name", "user_name", "assigned_to_name")

_USER_URL_RE = re.compile(r"/users/(\d+)/?$")
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def user_id_from_url(value: str) -> str | None:
    match = _USER_URL_RE.search(value.strip())
    return match.group(1) if match else None


def _as_id(value: Any) -> str | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str) and value.strip().isdigit():
        return value.strip()
    return None


def _parse_object(value: Any) -> OwnerRecord | None:
    if not isinstance(value, dict):
        return None
    owner_id = _as_id(value.get("id"))
    if owner_id is None and isinstance(value.get("url"), str):
        owner_id = user_id_from_url(value["url"])
    email = value.get("email") if isinstance(value.get("email"), str) else None
    name = value.get("name") or " ".join(
        p for p in (value.get("first_name"), value.get("last_name")) if p
    ) or None
    if owner_id is None and email is None:
        return None
    return OwnerRecord(id=owner_id, email=email, name=name, shape=OwnerShape.BY_OBJECT)


def _parse_url(value: Any) -> OwnerRecord | None:
    if not isinstance(value, str):
        return None
    owner_id = user_id_from_url(value)
    return OwnerRecord(id=owner_id, shape=OwnerShape.BY_URL) if owner_id else None


def _parse_id(value: Any) -> OwnerRecord | None:
    owner_id = _as_id(value)
    return OwnerRecord(id=owner_id, shape=OwnerShape.BY_ID) if owner_id else None


def _parse_email(value: Any) -> OwnerRecord | None:
    if isinstance(value, str) and _EMAIL_RE.match(value.strip()):
        return OwnerRecord(email=value.strip(), shape=OwnerShape.BY_EMAIL)
    return None


VALUE_PARSERS: tuple[Callable[[Any], OwnerRecord | None], ...] = (
    _parse_object,
    _parse_url,
    _parse_id,
    _parse_email,
)


def parse_owner(entity: dict | None) -> OwnerRecord:
    """Return the entity's owner; members that could not be found stay None."""
    if not isinstance(entity, dict):
        return OwnerRecord()

    found = [r for r in (_parse_id(entity.get(key)) for key in ID_FIELDS) if r]
    for key in GENERIC_FIELDS:
        value = entity.get(key)
        if value in (None, ""):
            continue
        parsed = next((r for r in (p(value) for p in VALUE_PARSERS) if r), None)
        if parsed:
            found.append(parsed)

    if not found:
        return OwnerRecord()

    # The first match sets the shape and wins each member; later ones only fill gaps
    record = found[0]
    for extra in found[1:]:
        record.id = record.id or extra.id
        record.email = record.email or extra.email
        record.name = record.name or extra.name

    if record.name is None:
        record.name = next(
            (entity[k] for k in NAME_FIELDS if isinstance(entity.get(k), str) and entity[k]),
            None,
        )
    return record


def parse_user(user: dict | None, user_id: str | None = None) -> OwnerRecord | None:
    """Normalize a ``GET /users/{id}/`` body."""
    if not isinstance(user, dict):
        return None
    record = _parse_object(user)
    if record is None:
        return OwnerRecord(id=user_id) if user_id else None
    if record.id is None:
        record.id = user_id
    return record
