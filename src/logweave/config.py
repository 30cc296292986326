"""Config file."""
from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    # INDEXER
    indexer_api_url: str = Field("https://indexing.conduit.xyz/v2/query", alias="INDEXER_API_URL")
    indexer_api_key: SecretStr | None = Field(None, alias="INDEXER_API_KEY")
    chain_id: int = Field(84532, alias="INDEXER_CHAIN_ID")
    timeout_s: float = Field(20, alias="INDEXER_TIMEOUT_S")

    # CONTRACTS
    staking_operators_address: str = Field("", alias="STAKING_OPERATORS_ADDRESS")
    heartbeat_manager_address: str = Field("", alias="HEARTBEAT_MANAGER_ADDRESS")
    nilav_router_address: str = Field("", alias="NILAV_ROUTER_ADDRESS")

    # LOGGING
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    @field_validator("staking_operators_address", "heartbeat_manager_address", "nilav_router_address")
    @classmethod
    def lowercase_address(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("log_level")
    @classmethod
    def upper_level(cls, v: str) -> str:
        return v.strip().upper()

    @property
    def api_key(self) -> str | None:
        return self.indexer_api_key.get_secret_value() if self.indexer_api_key else None

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore", populate_by_name=True)


settings: Settings = Settings()
