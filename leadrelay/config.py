"""Application configuration via Pydantic Settings.

NOTE: Every variable is mapped explicitly to the env name the deployment
already uses (CLIENTIFY_TOKEN, ELEVENLABS_SECRET, ...) to avoid silent
misconfiguration.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

DEFAULT_CLIENTIFY_BASE_URL = "https://api.clientify.net/v1"


class Settings(BaseSettings):
    # Clientify
    clientify_base_url: str = Field(
        default=DEFAULT_CLIENTIFY_BASE_URL,
        validation_alias="CLIENTIFY_BASE_URL",
    )
    clientify_token: str = Field(default="", validation_alias="CLIENTIFY_TOKEN")
    clientify_timeout: float = Field(default=15.0, validation_alias="CLIENTIFY_TIMEOUT")

    # Custom field ids (per account, optional)
    cf_destino_id: str = Field(default="", validation_alias="CLIENTIFY_CF_DESTINO_ID")
    cf_fecha_id: str = Field(default="", validation_alias="CLIENTIFY_CF_FECHA_ID")
    cf_adultos_id: str = Field(default="", validation_alias="CLIENTIFY_CF_ADULTOS_ID")
    cf_ninos_id: str = Field(default="", validation_alias="CLIENTIFY_CF_NINOS_ID")
    cf_urgencia_id: str = Field(default="", validation_alias="CLIENTIFY_CF_URGENCIA_ID")

    # Deals
    deal_stage_id: str = Field(default="", validation_alias="CLIENTIFY_DEAL_STAGE_ID")
    default_deal_amount: float = Field(default=0.0, validation_alias="DEFAULT_DEAL_AMOUNT")

    # Owner assignment
    agent_user_ids: str = Field(default="", validation_alias="CLIENTIFY_AGENT_USER_IDS")
    assignment_strategy: str = Field(default="hash", validation_alias="ASSIGNMENT_STRATEGY")
    validate_owners: bool = Field(default=True, validation_alias="CLIENTIFY_VALIDATE_OWNERS")
    assign_contact_owner: bool = Field(default=True, validation_alias="CLIENTIFY_ASSIGN_CONTACT_OWNER")
    owner_fields: str = Field(
        default="owner,owner_id,assigned_to",
        validation_alias="CLIENTIFY_OWNER_FIELDS",
    )
    verify_delay_ms: int = Field(default=250, validation_alias="CLIENTIFY_VERIFY_DELAY_MS")

    # Inbound webhook
    elevenlabs_secret: str = Field(default="", validation_alias="ELEVENLABS_SECRET")
    dry_run: bool = Field(default=False, validation_alias="DRY_RUN")

    # App
    debug: bool = Field(default=False, validation_alias="DEBUG")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "populate_by_name": True,
    }

    @field_validator("clientify_base_url")
    @classmethod
    def _fallback_base_url(cls, value: str) -> str:
        return value.strip() or DEFAULT_CLIENTIFY_BASE_URL

    @field_validator("clientify_token")
    @classmethod
    def _strip_token(cls, value: str) -> str:
        # Tokens pasted into dashboards often carry quotes or a trailing newline
        return value.replace("\r", "").replace("\n", "").replace("'", "").replace('"', "").strip()

    @property
    def agent_pool(self) -> list[str]:
        return [a.strip() for a in self.agent_user_ids.split(",") if a.strip()]

    @property
    def owner_field_keys(self) -> tuple[str, ...]:
        return tuple(f.strip() for f in self.owner_fields.split(",") if f.strip())

    @property
    def custom_field_ids(self) -> dict[str, str]:
        return {
            "destino": self.cf_destino_id,
            "fecha": self.cf_fecha_id,
            "adultos": self.cf_adultos_id,
            "ninos": self.cf_ninos_id,
            "urgencia": self.cf_urgencia_id,
        }


settings = Settings()
