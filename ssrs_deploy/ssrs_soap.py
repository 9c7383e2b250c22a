"""ReportingService2010 SOAP client construction built on zeep."""
from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from typing import Dict, Optional
from urllib.parse import quote, urlparse

import requests
from requests.auth import AuthBase, HTTPBasicAuth
from requests_ntlm import HttpNtlmAuth
from zeep import Client
from zeep.transports import Transport

from .config import ConnectionSettings, validate_endpoint
from .models import (
    ClientCredentialType,
    InvalidEndpointError,
    ProxyCredentialType,
    SecurityMode,
    UnsupportedSettingError,
)
from .validation import require, require_text

if sys.platform == "win32":
    from requests_negotiate_sspi import HttpNegotiateAuth
else:
    from requests_gssapi import OPTIONAL, HTTPSPNEGOAuth

logger = logging.getLogger(__name__)

AMBIENT = "ambient"
ANONYMOUS = "anonymous"
BASIC = "basic"
NEGOTIATE = "negotiate"
NTLM = "ntlm"

# SSPI accepts an explicit account; GSSAPI only uses the cached Kerberos ticket.
NEGOTIATE_WITH_PASSWORD = sys.platform == "win32"


@dataclass(frozen=True)
class Credentials:
    """Credentials carried by a client; ``scheme`` is one of the module constants."""

    scheme: str
    username: Optional[str] = None
    password: Optional[str] = None
    domain: Optional[str] = None

    @property
    def account(self) -> Optional[str]:
        if not self.username:
            return None
        if self.domain:
            return f"{self.domain}\\{self.username}"
        return self.username


@dataclass(frozen=True)
class Binding:
    """Transport configuration derived from :class:`ConnectionSettings`."""

    endpoint: str
    scheme: str
    security_mode: SecurityMode
    credentials: Credentials
    proxies: Dict[str, str]
    verify_ssl: bool
    timeout: int
    operation_timeout: Optional[int]

    @property
    def wsdl(self) -> str:
        return f"{self.endpoint}?wsdl"


@dataclass
class ReportingServiceClient:
    """A zeep client bound to one endpoint, plus the binding it was built from."""

    client: Client
    binding: Binding

    @property
    def service(self):
        return self.client.service

    @property
    def credentials(self) -> Credentials:
        return self.binding.credentials


def build_binding(settings: ConnectionSettings) -> Binding:
    """Map connection settings onto a binding. Pure; performs no I/O."""
    settings = require(settings, "settings")
    endpoint = validate_endpoint(settings.service_endpoint)
    scheme = urlparse(endpoint).scheme

    if settings.security_mode is SecurityMode.TRANSPORT and scheme != "https":
        raise UnsupportedSettingError(
            "Transport security mode requires an https service_endpoint."
        )

    return Binding(
        endpoint=endpoint,
        scheme=scheme,
        security_mode=settings.security_mode,
        credentials=_credentials(settings),
        proxies=_proxies(settings),
        verify_ssl=settings.verify_ssl,
        timeout=settings.timeout,
        operation_timeout=settings.operation_timeout,
    )


def _credentials(settings: ConnectionSettings) -> Credentials:
    if settings.security_mode is SecurityMode.NONE:
        return Credentials(scheme=ANONYMOUS)
    if settings.use_default_credentials:
        return Credentials(scheme=AMBIENT)

    credential_type = settings.client_credential_type
    if credential_type is ClientCredentialType.NONE:
        return Credentials(scheme=ANONYMOUS)

    username = require_text(settings.username, "username")
    password = settings.password or ""
    if credential_type is ClientCredentialType.BASIC:
        return Credentials(scheme=BASIC, username=username, password=password, domain=settings.domain)
    if credential_type is ClientCredentialType.WINDOWS and NEGOTIATE_WITH_PASSWORD:
        return Credentials(scheme=NEGOTIATE, username=username, password=password, domain=settings.domain)
    return Credentials(scheme=NTLM, username=username, password=password, domain=settings.domain)


def _proxies(settings: ConnectionSettings) -> Dict[str, str]:
    proxy_type = settings.proxy_credential_type
    if proxy_type is ProxyCredentialType.NONE:
        if settings.proxy_url:
            url = _parse_proxy_url(settings.proxy_url).geturl()
            return {"http": url, "https": url}
        return {}
    if proxy_type is not ProxyCredentialType.BASIC:
        raise UnsupportedSettingError(
            f"Proxy credential type {proxy_type.value} is not supported; use None or Basic."
        )

    proxy_url = _parse_proxy_url(require_text(settings.proxy_url, "proxy_url"))
    user = quote(require_text(settings.proxy_username, "proxy_username"), safe="")
    password = quote(settings.proxy_password or "", safe="")
    host = proxy_url.netloc.rpartition("@")[2]
    url = proxy_url._replace(netloc=f"{user}:{password}@{host}").geturl()
    return {"http": url, "https": url}


def _parse_proxy_url(value: str):
    parsed = urlparse(value.strip())
    if parsed.scheme not in ("http", "https") or not parsed.netloc.rpartition("@")[2]:
        raise InvalidEndpointError("proxy_url is not a valid http or https scheme url.")
    return parsed


def _integrated_auth(credentials: Credentials) -> AuthBase:
    """Negotiate (Kerberos, falling back to NTLM on Windows) as the given or current account."""
    if NEGOTIATE_WITH_PASSWORD:
        return HttpNegotiateAuth(
            username=credentials.username,
            password=credentials.password,
            domain=credentials.domain or None,
        )
    return HTTPSPNEGOAuth(mutual_authentication=OPTIONAL)


def _auth(credentials: Credentials) -> Optional[AuthBase]:
    if credentials.scheme in (AMBIENT, NEGOTIATE):
        return _integrated_auth(credentials)
    if credentials.scheme == BASIC:
        return HTTPBasicAuth(credentials.account, credentials.password)
    if credentials.scheme == NTLM:
        return HttpNtlmAuth(credentials.account, credentials.password)
    return None


def build_session(binding: Binding) -> requests.Session:
    """Return the HTTP session zeep will send requests through."""
    session = requests.Session()
    session.auth = _auth(binding.credentials)
    if binding.proxies:
        session.proxies.update(binding.proxies)
    session.verify = binding.verify_ssl
    return session


def create_client(settings: ConnectionSettings) -> ReportingServiceClient:
    """Build a ReportingService2010 client for one deployment call."""
    binding = build_binding(settings)
    logger.debug(
        "creating reporting service client",
        extra={"endpoint": binding.endpoint, "credential_scheme": binding.credentials.scheme},
    )
    transport = Transport(
        session=build_session(binding),
        timeout=binding.timeout,
        operation_timeout=binding.operation_timeout,
    )
    return ReportingServiceClient(client=Client(binding.wsdl, transport=transport), binding=binding)
