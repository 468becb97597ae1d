"""Clientify adapter — implements CRMPort over the Clientify REST API."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from leadrelay.application.ports.crm_port import CRMError, CRMPort, CRMResponse, CRMUnavailable
from leadrelay.config import Settings, settings as default_settings
from leadrelay.domain.entities.lead import Lead
from leadrelay.domain.value_objects.enums import EntityKind

logger = logging.getLogger(__name__)

DEFAULT_CONTACT_SOURCE = "AI Agent"
NOTE_TITLE = "Datos del Agente"


def _body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


class ClientifyAdapter(CRMPort):
    """httpx implementation of CRMPort.

    Non-2xx statuses are returned to the caller as CRMResponse, except for
    contact and deal creation which raise CRMError.
    """

    def __init__(self, config: Settings | None = None, client: httpx.AsyncClient | None = None):
        self._settings = config or default_settings
        self._base_url = self._settings.clientify_base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=self._settings.clientify_timeout)
        self._headers = {
            "Authorization": f"Token {self._settings.clientify_token}",
            "Accept": "application/json",
        }

    @property
    def base_url(self) -> str:
        return self._base_url

    def resource_url(self, kind: EntityKind | str, entity_id: str) -> str:
        kind = kind.value if isinstance(kind, EntityKind) else kind
        return f"{self._base_url}/{kind}/{entity_id}/"

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, json: dict | None = None) -> CRMResponse:
        url = f"{self._base_url}{path}"
        try:
            response = await self._client.request(method, url, json=json, headers=self._headers)
        except httpx.HTTPError as e:
            logger.warning("Clientify %s %s failed: %s", method, path, e)
            raise CRMUnavailable(f"{method} {path}: {e}") from e
        logger.debug("Clientify %s %s → %d", method, path, response.status_code)
        return CRMResponse(status=response.status_code, body=_body(response))

    async def _create(self, operation: str, path: str, payload: dict) -> dict:
        url = f"{self._base_url}{path}"
        try:
            result = await self._request("POST", path, json=payload)
        except CRMUnavailable as e:
            raise CRMError(operation, None, str(e), url=url) from e
        if not result.ok:
            logger.error("Clientify %s failed: %d %s", operation, result.status, result.body)
            raise CRMError(operation, result.status, result.body, url=url)
        return result.body if isinstance(result.body, dict) else {}

    async def create_contact(self, lead: Lead) -> dict:
        payload = {
            "first_name": lead.first_name,
            "last_name": lead.last_name,
            "email": lead.email,
            "phone": lead.phone,
            "contact_source": lead.source or DEFAULT_CONTACT_SOURCE,
            "tags": lead.tags,
            "summary": lead.summary or "",
        }
        contact = await self._create("createContact", "/contacts/", payload)
        logger.info("Clientify contact created: %s", contact.get("id"))
        return contact

    async def add_note(self, contact_id: str, text: str) -> CRMResponse:
        return await self._request(
            "POST",
            f"/contacts/{contact_id}/note/",
            json={"name": NOTE_TITLE, "comment": text},
        )

    async def update_custom_fields(self, contact_id: str, values: list[dict]) -> CRMResponse:
        return await self._request(
            "PATCH",
            f"/contacts/{contact_id}/",
            json={"custom_fields_values": values},
        )

    async def create_deal(
        self,
        contact_id: str,
        name: str,
        stage_id: str,
        amount: float,
        expected_close_date: str | None,
    ) -> dict:
        # Clientify links deals to contacts by resource URL
        payload = {
            "name": name,
            "contact": self.resource_url(EntityKind.CONTACT, contact_id),
            "stage": stage_id,
            "amount": amount,
            "expected_close_date": expected_close_date,
        }
        deal = await self._create("createDeal", "/deals/", payload)
        logger.info("Clientify deal created: %s", deal.get("id"))
        return deal

    async def update_entity(self, kind: EntityKind, entity_id: str, fields: dict) -> CRMResponse:
        return await self._request("PATCH", f"/{kind.value}/{entity_id}/", json=fields)

    async def get_entity(self, kind: EntityKind, entity_id: str) -> CRMResponse:
        return await self._request("GET", f"/{kind.value}/{entity_id}/")

    async def get_user(self, user_id: str) -> CRMResponse:
        return await self._request("GET", f"/users/{user_id}/")
