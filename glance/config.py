import json
from functools import lru_cache
from pathlib import Path
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration sourced from environment variables."""

    model_config = SettingsConfigDict(
        env_file=(".env",),
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    server_address: str = Field(default=":8080", alias="SERVER_ADDRESS")
    environment: str = Field(default="development", alias="ENV")
    log_level: str = Field(default="info", alias="LOG_LEVEL")
    log_json: bool = Field(default=False, alias="LOG_JSON")
    # Credentials: an explicit host/token pair wins over the kubeconfig file
    kube_config_path: str | None = Field(default=None, alias="KUBECONFIG")
    kube_context: str | None = Field(default=None, alias="KUBE_CONTEXT")
    k8s_host: str | None = Field(default=None, alias="K8S_HOST")
    k8s_token: str | None = Field(default=None, alias="K8S_TOKEN")
    k8s_insecure_skip_tls_verify: bool = Field(default=True, alias="K8S_INSECURE_SKIP_TLS_VERIFY")
    allowed_origins: Annotated[list[str], NoDecode] = Field(default_factory=lambda: ["*"], alias="ALLOWED_ORIGINS")
    request_timeout_seconds: float = Field(default=15.0, alias="REQUEST_TIMEOUT_SECONDS")
    shutdown_grace_seconds: int = Field(default=5, alias="SHUTDOWN_GRACE_SECONDS")
    remote_error_status_mapping: bool = Field(
        default=False,
        alias="REMOTE_ERROR_STATUS_MAPPING",
        description="Answer remote NotFound/Conflict/Forbidden with 404/409/403 instead of 500",
    )

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def _split_origins(cls, value):
        # Accepts "*", "http://a,http://b" or a JSON list
        if isinstance(value, str):
            value = value.strip()
            if value.startswith("["):
                return json.loads(value)
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @property
    def resolved_kube_config_path(self) -> str:
        if self.kube_config_path:
            return str(Path(self.kube_config_path).expanduser())
        return str(Path.home() / ".kube" / "config")

    @property
    def uses_token_auth(self) -> bool:
        return bool(self.k8s_host or self.k8s_token)

    def listen_address(self) -> tuple[str, int]:
        """Split ``SERVER_ADDRESS`` (``host:port`` or ``:port``) into its parts."""
        host, _, port = self.server_address.rpartition(":")
        host = host.strip("[]") or "0.0.0.0"
        try:
            return host, int(port)
        except ValueError as exc:
            raise ValueError(f"invalid SERVER_ADDRESS {self.server_address!r}") from exc


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()  # type: ignore[arg-type]
