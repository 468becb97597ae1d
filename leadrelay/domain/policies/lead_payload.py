"""LeadPayloadPolicy — normalizes and validates inbound voice-agent events."""

from __future__ import annotations

import math
import re
from typing import Any

from leadrelay.domain.entities.lead import Lead

ENVELOPE_TYPE = "intent_detected"
CREATE_LEAD_INTENT = "create_lead"

LEAD_KEYS = (
    "name",
    "first_name",
    "last_name",
    "email",
    "phone",
    "summary",
    "source",
    "tags",
    "destino_crucero",
    "fecha_crucero",
    "adultos",
    "ninos",
    "urgencia_compra",
)


class LeadPayloadError(ValueError):
    """Raised when an inbound envelope or lead payload is malformed."""


def wrap_if_flat(raw: Any) -> Any:
    """Wrap a flat lead record into a ``{type, intent, payload}`` envelope.

    Envelopes that already carry ``payload``, ``type`` and ``intent`` are
    returned as-is, as is anything that does not look like a lead.
    """
    if not isinstance(raw, dict):
        return raw
    if raw.get("payload") and raw.get("type") and raw.get("intent"):
        return raw
    if not any(raw.get(k) for k in ("name", "email", "phone", "last_name")):
        return raw

    rest = {k: v for k, v in raw.items() if k not in LEAD_KEYS and k not in ("type", "intent")}
    return {
        "type": raw.get("type") or ENVELOPE_TYPE,
        "intent": raw.get("intent") or CREATE_LEAD_INTENT,
        "payload": {k: raw.get(k) for k in LEAD_KEYS},
        **rest,
    }


def validate_envelope(envelope: Any) -> None:
    if not isinstance(envelope, dict) or not envelope:
        raise LeadPayloadError("Body is empty or not a JSON object")
    if envelope.get("type") != ENVELOPE_TYPE:
        raise LeadPayloadError(f"type must be '{ENVELOPE_TYPE}'")
    if not envelope.get("intent"):
        raise LeadPayloadError("Missing 'intent'")
    if not isinstance(envelope.get("payload"), dict):
        raise LeadPayloadError("Missing 'payload'")


def validate_lead_payload(payload: dict) -> None:
    if not payload.get("name") and not payload.get("first_name"):
        raise LeadPayloadError("Missing 'name' or 'first_name'")
    if not payload.get("email") and not payload.get("phone"):
        raise LeadPayloadError("Either 'email' or 'phone' is required")


def split_name(full: str | None = "", last: str | None = "") -> tuple[str, str]:
    """Split a full name into (first, last); an explicit last name wins."""
    full = str(full or "").strip()
    if last:
        return full, str(last).strip()
    parts = full.split()
    if len(parts) > 1:
        return parts[0], " ".join(parts[1:])
    return (parts[0] if parts else ""), ""


def normalize_int(value: Any) -> int | float | None:
    """Extract a number from loosely formatted input.

    "2 adultos" → 2, "2.5" → 2.5, and text with no digits at all ("dos") → 0.
    Leftovers that are not a number ("-", "1.2.3") give None.
    """
    if value is None or value == "":
        return None
    cleaned = re.sub(r"[^\d.-]", "", str(value))
    if not cleaned:
        return 0
    try:
        number = float(cleaned)
    except ValueError:
        return None
    if not math.isfinite(number):
        return None
    return int(number) if number.is_integer() else number


def clean_date(value: Any) -> str | None:
    if not value:
        return None
    return str(value).strip() or None


def parse_tags(raw: Any) -> list[str]:
    if isinstance(raw, list):
        return [str(t).strip() for t in raw if str(t).strip()]
    if isinstance(raw, str):
        return [t.strip() for t in raw.split(",") if t.strip()]
    return []


def lead_from_payload(payload: dict) -> Lead:
    """Validate a lead payload and build the Lead entity."""
    validate_lead_payload(payload)
    first_name, last_name = split_name(
        payload.get("name") or payload.get("first_name"),
        payload.get("last_name"),
    )
    return Lead(
        first_name=first_name,
        last_name=last_name,
        email=payload.get("email") or None,
        phone=payload.get("phone") or None,
        summary=payload.get("summary") or None,
        source=payload.get("source") or None,
        tags=parse_tags(payload.get("tags")),
        destination=payload.get("destino_crucero") or None,
        cruise_date=clean_date(payload.get("fecha_crucero")),
        adults=normalize_int(payload.get("adultos")),
        children=normalize_int(payload.get("ninos")),
        purchase_urgency=payload.get("urgencia_compra") or None,
    )
