"""Request objects, enumerations and errors shared across modules."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Optional, Union


class ClientCredentialType(str, Enum):
    """Credential scheme used to authenticate against the report server."""

    WINDOWS = "Windows"
    NTLM = "Ntlm"
    BASIC = "Basic"
    NONE = "None"


class SecurityMode(str, Enum):
    """Transport security applied to the SOAP binding."""

    NONE = "None"
    TRANSPORT = "Transport"
    TRANSPORT_CREDENTIAL_ONLY = "TransportCredentialOnly"


class ProxyCredentialType(str, Enum):
    NONE = "None"
    BASIC = "Basic"
    DIGEST = "Digest"
    NTLM = "Ntlm"
    WINDOWS = "Windows"


class ItemType(str, Enum):
    """SSRS catalog item types that can be uploaded."""

    REPORT = "Report"
    DATASET = "DataSet"
    DATASOURCE = "DataSource"


@dataclass
class FindItemRequest:
    """Name lookup scoped to a catalog folder."""

    folder: Optional[str] = None
    item_name: Optional[str] = None
    recursive: bool = False


@dataclass
class SaveItemRequest:
    """A local file to be saved into an SSRS folder."""

    item_file_path: Union[str, Path]
    folder_path: str
    item_type: ItemType
    properties: Dict[str, str] = field(default_factory=dict)


@dataclass
class DataSourceDefinition:
    """Connection properties read from a shared data source (.rds) file."""

    name: Optional[str]
    extension: Optional[str]
    connect_string: Optional[str]
    integrated_security: Optional[bool] = None
    data_source_id: Optional[str] = None


class SsrsError(Exception):
    """Base error raised by the deployment helpers."""

    code = "ssrs_error"

    def __init__(self, message: str, code: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        if code:
            self.code = code


class MissingArgumentError(SsrsError, ValueError):
    """A required argument was ``None`` or blank."""

    code = "missing_argument"

    def __init__(self, argument: str) -> None:
        super().__init__(f"Missing required argument: {argument}")
        self.argument = argument


class InvalidEndpointError(SsrsError, ValueError):
    code = "invalid_endpoint"


class UnsupportedSettingError(SsrsError, ValueError):
    code = "unsupported_setting"


class DataSourceDefinitionError(SsrsError):
    code = "invalid_datasource"
