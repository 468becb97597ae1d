"""Port interface for the CRM REST API."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from leadrelay.domain.entities.lead import Lead
from leadrelay.domain.value_objects.enums import EntityKind


class CRMError(Exception):
    """A CRM call whose failure must abort the request."""

    def __init__(self, operation: str, status: int | None, body: Any = None, url: str | None = None):
        self.operation = operation
        self.status = status
        self.body = body
        self.url = url
        super().__init__(f"{operation} → {status} {body}")


class CRMUnavailable(Exception):
    """The CRM could not be reached (connection error, timeout)."""


@dataclass
class CRMResponse:
    """Raw outcome of a non-fatal CRM call."""

    status: int
    body: Any = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class CRMPort(ABC):
    @property
    @abstractmethod
    def base_url(self) -> str:
        ...

    @abstractmethod
    async def create_contact(self, lead: Lead) -> dict:
        """Create a contact; raises CRMError on any non-2xx status."""
        ...

    @abstractmethod
    async def add_note(self, contact_id: str, text: str) -> CRMResponse:
        ...

    @abstractmethod
    async def update_custom_fields(self, contact_id: str, values: list[dict]) -> CRMResponse:
        ...

    @abstractmethod
    async def create_deal(
        self,
        contact_id: str,
        name: str,
        stage_id: str,
        amount: float,
        expected_close_date: str | None,
    ) -> dict:
        """Create a deal linked to the contact; raises CRMError on failure."""
        ...

    @abstractmethod
    async def update_entity(self, kind: EntityKind, entity_id: str, fields: dict) -> CRMResponse:
        """PATCH an entity. Raises CRMUnavailable on transport errors."""
        ...

    @abstractmethod
    async def get_entity(self, kind: EntityKind, entity_id: str) -> CRMResponse:
        ...

    @abstractmethod
    async def get_user(self, user_id: str) -> CRMResponse:
        ...
