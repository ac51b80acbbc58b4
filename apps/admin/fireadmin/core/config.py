"""Library configuration."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables."""

    project_id: str | None = None
    database_url: str | None = None
    api_key: str | None = None
    service_account_file: str | None = None
    use_default_credentials: bool = False

    http_timeout_seconds: float = Field(default=10.0, gt=0)
    database_timeout_seconds: float = Field(default=60.0, gt=0)
    token_leeway_seconds: int = Field(default=0, ge=0)
    database_token_in_url: bool = True

    public_keys_url: str = (
        "https://www.googleapis.com/robot/v1/metadata/x509/securetoken@system.gserviceaccount.com"
    )
    relying_party_url: str = "https://www.googleapis.com/identitytoolkit/v3/relyingparty/"
    fcm_send_url: str = "https://fcm.googleapis.com/fcm/send"
    fcm_topic_url: str = "https://iid.googleapis.com/iid/v1"

    model_config = SettingsConfigDict(env_prefix="FIREADMIN_", extra="ignore")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
