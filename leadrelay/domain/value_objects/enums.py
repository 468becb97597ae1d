"""Domain enums — pure Python, no external dependencies."""

from enum import Enum


class EntityKind(str, Enum):
    CONTACT = "contacts"
    DEAL = "deals"


class OwnerEncoding(str, Enum):
    """How an owner reference is written into an owner field."""

    ID = "id"
    URL = "url"
    EMAIL = "email"


class OwnerShape(str, Enum):
    """Which response shape an owner was parsed from."""

    BY_ID = "by_id"
    BY_URL = "by_url"
    BY_EMAIL = "by_email"
    BY_OBJECT = "by_object"


class AttemptState(str, Enum):
    PENDING = "pending"
    ATTEMPTED = "attempted"
    VERIFIED = "verified"
    EXHAUSTED = "exhausted"
