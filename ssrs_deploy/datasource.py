"""Shared data source (.rds) file parsing."""
from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import Optional

from .models import DataSourceDefinition, DataSourceDefinitionError

ROOT_TAG = "RptDataSource"


def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _child(element: ET.Element, name: str) -> Optional[ET.Element]:
    for child in element:
        if _local(child.tag) == name:
            return child
    return None


def _text(element: ET.Element, name: str) -> Optional[str]:
    child = _child(element, name)
    if child is None or child.text is None:
        return None
    return child.text.strip()


def _parse_bool(value: Optional[str]) -> Optional[bool]:
    if value is None or value == "":
        return None
    normalized = value.lower()
    if normalized in {"true", "1"}:
        return True
    if normalized in {"false", "0"}:
        return False
    raise DataSourceDefinitionError(f"IntegratedSecurity must be a boolean, got {value!r}")


def parse_datasource(content: bytes) -> DataSourceDefinition:
    """Parse the bytes of an ``RptDataSource`` document.

    Expected shape::

        <RptDataSource Name="AdventureWorks">
          <ConnectionProperties>
            <Extension>SQL</Extension>
            <ConnectString>Data Source=.;Initial Catalog=AdventureWorks</ConnectString>
            <IntegratedSecurity>true</IntegratedSecurity>
          </ConnectionProperties>
          <DataSourceID>...</DataSourceID>
        </RptDataSource>
    """
    try:
        root = ET.fromstring(content)
    except ET.ParseError as exc:
        raise DataSourceDefinitionError(f"Data source file is not valid XML: {exc}") from exc

    if _local(root.tag) != ROOT_TAG:
        raise DataSourceDefinitionError(
            f"Expected root element {ROOT_TAG}, found {_local(root.tag)}"
        )

    properties = _child(root, "ConnectionProperties")
    if properties is None:
        raise DataSourceDefinitionError("Data source file has no ConnectionProperties element")

    return DataSourceDefinition(
        name=root.get("Name"),
        extension=_text(properties, "Extension"),
        connect_string=_text(properties, "ConnectString"),
        integrated_security=_parse_bool(_text(properties, "IntegratedSecurity")),
        data_source_id=_text(root, "DataSourceID"),
    )


def to_soap_definition(definition: DataSourceDefinition) -> dict:
    """Build the ReportingService2010 ``DataSourceDefinition`` payload."""
    return {
        "Extension": definition.extension,
        "ConnectString": definition.connect_string,
        "CredentialRetrieval": "Integrated" if definition.integrated_security else "None",
        "Enabled": True,
        "ImpersonateUser": False,
        "WindowsCredentials": False,
        "UseOriginalConnectString": False,
        "OriginalConnectStringExpressionBased": False,
    }
