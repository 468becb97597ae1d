"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from typing import Callable

import pytest

from leadrelay.application.ports.crm_port import CRMError, CRMPort, CRMResponse, CRMUnavailable
from leadrelay.domain.entities.lead import Lead
from leadrelay.domain.value_objects.enums import EntityKind

BASE_URL = "https://api.test/v1"

# (field, value) → (status, value that sticks or None)
WriteRule = Callable[[str, object], tuple[int, object]]


def accept_all(field: str, value: object) -> tuple[int, object]:
    return 200, value


def accept_email_only(field: str, value: object) -> tuple[int, object]:
    if isinstance(value, str) and "@" in value:
        return 200, value
    return 400, None


def accept_but_ignore(field: str, value: object) -> tuple[int, object]:
    return 200, None


class FakeCRM(CRMPort):
    """In-memory CRM: users, contacts and deals with a pluggable owner write rule."""

    def __init__(self, users: dict[str, dict] | None = None, write_rule: WriteRule = accept_all):
        self.users = users or {}
        self.write_rule = write_rule
        self.entities: dict[tuple[EntityKind, str], dict] = {}
        self.calls: list[tuple] = []
        self.fail_contact = False
        self.fail_deal = False
        self.note_status = 201
        self.unavailable: set[str] = set()
        self._next_id = 12345

    @property
    def base_url(self) -> str:
        return BASE_URL

    def _check(self, op: str) -> None:
        if op in self.unavailable:
            raise CRMUnavailable(f"{op}: connection refused")

    def _new_id(self) -> str:
        new_id = str(self._next_id)
        self._next_id += 1
        return new_id

    async def create_contact(self, lead: Lead) -> dict:
        self.calls.append(("create_contact", lead.email))
        if self.fail_contact:
            raise CRMError("createContact", 400, {"email": ["invalid"]}, url=f"{BASE_URL}/contacts/")
        contact = {"id": int(self._new_id()), "owner": "999"}
        self.entities[(EntityKind.CONTACT, str(contact["id"]))] = contact
        return contact

    async def add_note(self, contact_id: str, text: str) -> CRMResponse:
        self.calls.append(("add_note", contact_id, text))
        self._check("add_note")
        return CRMResponse(status=self.note_status, body={})

    async def update_custom_fields(self, contact_id: str, values: list[dict]) -> CRMResponse:
        self.calls.append(("update_custom_fields", contact_id, values))
        return CRMResponse(status=200, body={})

    async def create_deal(self, contact_id, name, stage_id, amount, expected_close_date) -> dict:
        self.calls.append(("create_deal", contact_id, name, stage_id, amount, expected_close_date))
        if self.fail_deal:
            raise CRMError("createDeal", 500, "boom", url=f"{BASE_URL}/deals/")
        deal = {"id": int(self._new_id()), "owner": "999"}
        self.entities[(EntityKind.DEAL, str(deal["id"]))] = deal
        return deal

    async def update_entity(self, kind: EntityKind, entity_id: str, fields: dict) -> CRMResponse:
        self.calls.append(("update_entity", kind, entity_id, fields))
        self._check("update_entity")
        ((field, value),) = fields.items()
        status, stored = self.write_rule(field, value)
        if 200 <= status < 300 and stored is not None:
            entity = self.entities.setdefault((kind, str(entity_id)), {"id": entity_id})
            entity.pop("owner", None)
            entity["owner"] = stored
        return CRMResponse(status=status, body={} if status < 300 else {"owner": ["invalid"]})

    async def get_entity(self, kind: EntityKind, entity_id: str) -> CRMResponse:
        self.calls.append(("get_entity", kind, entity_id))
        self._check("get_entity")
        entity = self.entities.get((kind, str(entity_id)))
        if entity is None:
            return CRMResponse(status=404, body={"detail": "Not found."})
        return CRMResponse(status=200, body=dict(entity))

    async def get_user(self, user_id: str) -> CRMResponse:
        self.calls.append(("get_user", user_id))
        self._check("get_user")
        user = self.users.get(str(user_id))
        if user is None:
            return CRMResponse(status=404, body={"detail": "Not found."})
        return CRMResponse(status=200, body=user)

    def calls_named(self, name: str) -> list[tuple]:
        return [c for c in self.calls if c[0] == name]


@pytest.fixture
def agents() -> dict[str, dict]:
    return {
        "7": {"id": 7, "first_name": "Ana", "last_name": "Ruiz", "email": "ana@agency.test"},
        "9": {"id": 9, "first_name": "Luis", "last_name": "Gil", "email": "luis@agency.test"},
        "11": {"id": 11, "first_name": "Marta", "last_name": "Sol", "email": "marta@agency.test"},
    }


@pytest.fixture
def crm(agents) -> FakeCRM:
    return FakeCRM(users=agents)


@pytest.fixture
def sample_payload() -> dict:
    return {
        "name": "Carmen López García",
        "email": "carmen@example.com",
        "phone": "+34 600 000 000",
        "summary": "Quiere un crucero por el Mediterráneo",
        "source": "ElevenLabs",
        "tags": "crucero, verano",
        "destino_crucero": "Mediterráneo",
        "fecha_crucero": " 2026-07-15 ",
        "adultos": "2 adultos",
        "ninos": "1",
        "urgencia_compra": "alta",
    }
