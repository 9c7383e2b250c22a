"""Connection settings powered by environment variables."""
from __future__ import annotations

from functools import lru_cache
from typing import Any, Callable, Optional, Union
from urllib.parse import urlparse

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import (
    ClientCredentialType,
    InvalidEndpointError,
    ProxyCredentialType,
    SecurityMode,
)
from .validation import require, require_text

load_dotenv()


class ConnectionSettings(BaseSettings):
    """Settings for reaching the ReportService2010 endpoint.

    ``service_endpoint`` is the url of the SOAP endpoint, e.g.
    ``http://<server>/ReportServer/ReportService2010.asmx``.
    """

    service_endpoint: str = Field(default="", alias="SSRS_SERVICE_ENDPOINT")
    username: Optional[str] = Field(default=None, alias="SSRS_USERNAME")
    password: Optional[str] = Field(default=None, alias="SSRS_PASSWORD")
    domain: Optional[str] = Field(default=None, alias="SSRS_DOMAIN")
    use_default_credentials: bool = Field(default=False, alias="SSRS_USE_DEFAULT_CREDENTIALS")
    client_credential_type: ClientCredentialType = Field(
        default=ClientCredentialType.NTLM, alias="SSRS_CLIENT_CREDENTIAL_TYPE"
    )
    security_mode: SecurityMode = Field(
        default=SecurityMode.TRANSPORT_CREDENTIAL_ONLY, alias="SSRS_SECURITY_MODE"
    )
    proxy_credential_type: ProxyCredentialType = Field(
        default=ProxyCredentialType.NONE, alias="SSRS_PROXY_CREDENTIAL_TYPE"
    )
    proxy_url: Optional[str] = Field(default=None, alias="SSRS_PROXY_URL")
    proxy_username: Optional[str] = Field(default=None, alias="SSRS_PROXY_USERNAME")
    proxy_password: Optional[str] = Field(default=None, alias="SSRS_PROXY_PASSWORD")
    verify_ssl: bool = Field(default=True, alias="SSRS_VERIFY_SSL")
    timeout: int = Field(default=300, alias="SSRS_TIMEOUT")
    operation_timeout: Optional[int] = Field(default=None, alias="SSRS_OPERATION_TIMEOUT")
    log_level: str = Field(default="INFO", alias="SSRS_LOG_LEVEL")

    model_config = SettingsConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("client_credential_type", "security_mode", "proxy_credential_type", mode="before")
    @classmethod
    def _parse_enum(cls, value: Any, info) -> Any:
        if not isinstance(value, str):
            return value
        enum_type = cls.model_fields[info.field_name].annotation
        normalized = value.strip().replace("_", "").lower()
        for member in enum_type:
            if normalized in (member.value.lower(), member.name.replace("_", "").lower()):
                return member
        return value

    def with_default_credentials(self) -> "ConnectionSettings":
        """Authenticate as the account the process is running under."""
        self.password = None
        self.domain = None
        self.username = None
        self.use_default_credentials = True
        return self

    def authenticate_with(
        self, username: Optional[str], password: Optional[str], domain: Optional[str] = ""
    ) -> "ConnectionSettings":
        """Authenticate with explicit credentials; returns ``self`` for chaining."""
        self.username = require_text(username, "username")
        self.password = require_text(password, "password")
        self.domain = domain or ""
        self.use_default_credentials = False
        return self

    def with_service_endpoint(self, service_endpoint: Optional[str]) -> "ConnectionSettings":
        self.service_endpoint = validate_endpoint(service_endpoint)
        return self


SettingsArg = Union[ConnectionSettings, Callable[[ConnectionSettings], Any]]


def validate_endpoint(service_endpoint: Optional[str]) -> str:
    """Return the endpoint when it is an absolute http or https url."""
    value = require_text(service_endpoint, "service_endpoint")
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InvalidEndpointError("service_endpoint is not a valid http or https scheme url.")
    return value


def resolve_settings(settings: Optional[SettingsArg], name: str = "settings") -> ConnectionSettings:
    """Accept a settings instance or a configurator callable.

    A configurator receives a fresh :class:`ConnectionSettings` (built from the
    environment) and mutates it in place.
    """
    settings = require(settings, name)
    if isinstance(settings, ConnectionSettings):
        return settings
    configured = ConnectionSettings()
    settings(configured)
    return configured


@lru_cache(maxsize=1)
def get_settings() -> ConnectionSettings:
    """Return cached settings read from the environment."""
    return ConnectionSettings()
