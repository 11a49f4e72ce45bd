# chatroulette/config.py
import json
from functools import lru_cache
from typing import Annotated, Any, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from protocol.types import PURPOSES


class Settings(BaseSettings):
    # env aliases only: field names like "path" / "key" would collide with $PATH / $KEY

    # Listener
    host: str = Field(default="0.0.0.0", validation_alias="HOST")
    port: int = Field(default=9000, validation_alias="PORT")
    path: str = Field(default="/openchatroulette", validation_alias="PEER_PATH")
    key: str = Field(default="peerjs", validation_alias="PEER_KEY")

    # GeoIP (MaxMind GeoLite2 Country database)
    geoip_db_path: Optional[str] = Field(default="GeoLite2-Country.mmdb", validation_alias="GEOIP_DB_PATH")

    # Matching: "discussion,dating" or a JSON list
    allowed_purposes: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: list(PURPOSES), validation_alias="ALLOWED_PURPOSES")

    # "dev" turns on verbose logging unless LOG_LEVEL says otherwise
    environment: str = Field(default="dev", validation_alias="NODE_ENV")
    log_level: Optional[str] = Field(default=None, validation_alias="LOG_LEVEL")

    # WebSocket
    ping_interval: int = Field(default=20, validation_alias="WS_PING_INTERVAL")   # seconds
    ping_timeout: int = Field(default=20, validation_alias="WS_PING_TIMEOUT")     # seconds
    max_message_size: int = Field(default=2**16, validation_alias="WS_MAX_MESSAGE_SIZE")

    # Read-only registry/queue dump at {path}/admin/state; put auth in front of it
    admin_enabled: bool = Field(default=False, validation_alias="ADMIN_ENABLED")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("allowed_purposes", mode="before")
    @classmethod
    def _split_purposes(cls, value: Any) -> Any:
        if not isinstance(value, str):
            return value
        value = value.strip()
        if value.startswith("["):
            return json.loads(value)
        return [p.strip() for p in value.split(",") if p.strip()]

    @property
    def effective_log_level(self) -> str:
        if self.log_level:
            return self.log_level.upper()
        return "DEBUG" if self.environment == "dev" else "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()
