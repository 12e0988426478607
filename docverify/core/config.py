from functools import lru_cache
from typing import Literal

from pydantic import AnyHttpUrl, Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    project_name: str = "Document Integrity Verifier"
    environment: Literal["local", "dev", "staging", "prod", "test"] = Field("local", alias="ENVIRONMENT")

    # Verification service (client side)
    verification_service_url: AnyHttpUrl = Field("http://localhost:5000/api", alias="VERIFICATION_SERVICE_URL")
    verification_service_timeout: float = Field(10.0, alias="VERIFICATION_SERVICE_TIMEOUT")
    uploader_id: str = Field("ClientDemoUser", alias="UPLOADER_ID")

    # Reference backend
    api_prefix: str = Field("/api", alias="API_PREFIX")
    ledger_account_address: str = Field("0x90F8bf6A479f320ead074411a4B0e7944Ea8c9C1", alias="LEDGER_ACCOUNT_ADDRESS")
    ledger_genesis_block: int = Field(0, alias="LEDGER_GENESIS_BLOCK")

    # Observability
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_format: Literal["json", "text"] = Field("json", alias="LOG_FORMAT")

    @field_validator("verification_service_url", "uploader_id", mode="before")
    @classmethod
    def blank_to_default(cls, value: str | None, info: ValidationInfo):
        if isinstance(value, str) and value.strip() == "":
            return cls.model_fields[info.field_name].default
        return value

    @property
    def verification_base_url(self) -> str:
        return str(self.verification_service_url).rstrip("/")


@lru_cache
def get_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]


settings = get_settings()
