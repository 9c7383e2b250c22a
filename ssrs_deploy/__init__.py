"""Deployment helpers for SQL Server Reporting Services over ReportService2010."""

from .aliases import (
    create_folder,
    find_item,
    upload_dataset,
    upload_datasets,
    upload_datasource,
    upload_datasources,
    upload_report,
    upload_reports,
)
from .config import ConnectionSettings, get_settings
from .models import (
    ClientCredentialType,
    FindItemRequest,
    ItemType,
    MissingArgumentError,
    ProxyCredentialType,
    SecurityMode,
    SsrsError,
)

__all__ = [
    "ClientCredentialType",
    "ConnectionSettings",
    "FindItemRequest",
    "ItemType",
    "MissingArgumentError",
    "ProxyCredentialType",
    "SecurityMode",
    "SsrsError",
    "create_folder",
    "find_item",
    "get_settings",
    "upload_dataset",
    "upload_datasets",
    "upload_datasource",
    "upload_datasources",
    "upload_report",
    "upload_reports",
]
