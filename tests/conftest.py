from __future__ import annotations

import os
from types import SimpleNamespace
from typing import Any

import pytest

from ssrs_deploy import config
from ssrs_deploy.config import ConnectionSettings
from ssrs_deploy.ssrs_soap import ReportingServiceClient, build_binding

ENDPOINT = "http://localhost/reportserver/ReportService2010.asmx"

RDS_CONTENT = b"""<?xml version="1.0" encoding="utf-8"?>
<RptDataSource xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance" xmlns:xsd="http://www.w3.org/2001/XMLSchema" Name="AdventureWorks">
  <ConnectionProperties>
    <Extension>SQL</Extension>
    <ConnectString>Data Source=localhost;Initial Catalog=AdventureWorks2014</ConnectString>
    <IntegratedSecurity>true</IntegratedSecurity>
  </ConnectionProperties>
  <DataSourceID>0b3b8c47-8f1a-4c52-9d0d-7c0c34c7a0a1</DataSourceID>
</RptDataSource>
"""


def catalog_item(name: str, parent: str, type_name: str) -> SimpleNamespace:
    return SimpleNamespace(Name=name, Path=f"{parent.rstrip('/')}/{name}", TypeName=type_name)


class FakeService:
    """Stands in for the zeep service proxy and records every SOAP call."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.catalog: dict[tuple[str, str], SimpleNamespace] = {}
        self.references: dict[str, list[SimpleNamespace]] = {}
        self.warnings: list[str] = []

    def calls_to(self, operation: str) -> list[dict[str, Any]]:
        return [kwargs for name, kwargs in self.calls if name == operation]

    @property
    def operations(self) -> list[str]:
        return [name for name, _ in self.calls]

    def FindItems(self, **kwargs):
        self.calls.append(("FindItems", kwargs))
        name = kwargs["SearchConditions"]["SearchCondition"][0]["Values"]["Value"][0]
        item = self.catalog.get((kwargs["Folder"], name))
        return SimpleNamespace(CatalogItem=[item]) if item else None

    def CreateFolder(self, **kwargs):
        self.calls.append(("CreateFolder", kwargs))
        item = catalog_item(kwargs["Folder"], kwargs["Parent"], "Folder")
        self.catalog[(kwargs["Parent"], kwargs["Folder"])] = item
        return item

    def CreateCatalogItem(self, **kwargs):
        self.calls.append(("CreateCatalogItem", kwargs))
        item = catalog_item(kwargs["Name"], kwargs["Parent"], kwargs["ItemType"])
        warnings = None
        if self.warnings:
            warnings = SimpleNamespace(Warning=[SimpleNamespace(Message=m) for m in self.warnings])
        return SimpleNamespace(ItemInfo=item, Warnings=warnings)

    def CreateDataSource(self, **kwargs):
        self.calls.append(("CreateDataSource", kwargs))
        return catalog_item(kwargs["DataSource"], kwargs["Parent"], "DataSource")

    def GetItemReferences(self, **kwargs):
        self.calls.append(("GetItemReferences", kwargs))
        refs = self.references.get(kwargs["ItemPath"])
        return SimpleNamespace(ItemReferenceData=refs) if refs else None

    def SetItemReferences(self, **kwargs):
        self.calls.append(("SetItemReferences", kwargs))


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for name in list(os.environ):
        if name.startswith("SSRS_"):
            monkeypatch.delenv(name, raising=False)
    config.get_settings.cache_clear()
    yield
    config.get_settings.cache_clear()


@pytest.fixture
def settings() -> ConnectionSettings:
    return ConnectionSettings(service_endpoint=ENDPOINT).with_default_credentials()


@pytest.fixture
def service(monkeypatch) -> FakeService:
    fake = FakeService()
    created: list[ConnectionSettings] = []

    def fake_create_client(settings: ConnectionSettings) -> ReportingServiceClient:
        created.append(settings)
        return ReportingServiceClient(client=SimpleNamespace(service=fake), binding=build_binding(settings))

    monkeypatch.setattr("ssrs_deploy.aliases.create_client", fake_create_client)
    fake.clients_created = created
    return fake


@pytest.fixture
def endpoint() -> str:
    return ENDPOINT


@pytest.fixture
def make_item():
    return catalog_item


@pytest.fixture
def rds_content() -> bytes:
    return RDS_CONTENT
