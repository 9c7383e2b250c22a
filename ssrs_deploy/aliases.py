"""Deployment helpers for SSRS folders, reports, shared datasets and data sources."""
from __future__ import annotations

import glob
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from .config import SettingsArg, resolve_settings
from .datasource import parse_datasource, to_soap_definition
from .models import FindItemRequest, ItemType, SaveItemRequest
from .ssrs_soap import ReportingServiceClient, create_client
from .utils.logging import item_context
from .validation import require, require_text

logger = logging.getLogger(__name__)

READ_ONLY_PROPERTIES = {"name"}

PathArg = Union[str, Path]


def create_folder(
    folder_name: Optional[str], parent_folder: Optional[str], settings: Optional[SettingsArg]
) -> Any:
    """Create ``folder_name`` under ``parent_folder`` unless it already exists.

    An empty ``parent_folder`` means the catalog root. Returns the existing or
    newly created catalog item.
    """
    settings = resolve_settings(settings)
    folder_name = require_text(folder_name, "folder_name")
    if not parent_folder or not parent_folder.strip():
        parent_folder = "/"

    client = create_client(settings)
    existing = _find_item(
        client, FindItemRequest(folder=parent_folder, item_name=folder_name, recursive=False)
    )
    if existing is not None:
        logger.warning(
            "Folder %s/%s already exists on the SSRS server.",
            parent_folder.rstrip("/"),
            folder_name,
            extra=item_context(folder_name, parent_folder, endpoint=client.binding.endpoint),
        )
        return existing

    created = client.service.CreateFolder(Folder=folder_name, Parent=parent_folder, Properties=None)
    logger.info(
        "Created new SSRS folder: %s/%s.",
        parent_folder.rstrip("/"),
        folder_name,
        extra=item_context(folder_name, parent_folder, endpoint=client.binding.endpoint),
    )
    return _item_info(created)


def find_item(request: Optional[FindItemRequest], settings: Optional[SettingsArg]) -> Any:
    """Return the first catalog item named ``request.item_name`` in ``request.folder``, or None."""
    settings = resolve_settings(settings)
    request = require(request, "request")
    require_text(request.folder, "folder")
    require_text(request.item_name, "item_name")
    return _find_item(create_client(settings), request)


def upload_report(
    file_path: Optional[PathArg],
    folder_path: Optional[str],
    settings: Optional[SettingsArg],
    properties: Optional[Mapping[str, str]] = None,
) -> Any:
    """Upload a single report definition (.rdl) to ``folder_path``."""
    return _upload_file(ItemType.REPORT, file_path, folder_path, settings, properties)


def upload_reports(
    pattern: Optional[str],
    folder_path: Optional[str],
    settings: Optional[SettingsArg],
    properties: Optional[Mapping[str, str]] = None,
) -> List[Any]:
    """Upload every report matching the glob ``pattern``."""
    return _upload_pattern(ItemType.REPORT, pattern, folder_path, settings, properties)


def upload_dataset(
    file_path: Optional[PathArg],
    folder_path: Optional[str],
    settings: Optional[SettingsArg],
    properties: Optional[Mapping[str, str]] = None,
) -> Any:
    """Upload a single shared dataset (.rsd) to ``folder_path``."""
    return _upload_file(ItemType.DATASET, file_path, folder_path, settings, properties)


def upload_datasets(
    pattern: Optional[str],
    folder_path: Optional[str],
    settings: Optional[SettingsArg],
    properties: Optional[Mapping[str, str]] = None,
) -> List[Any]:
    return _upload_pattern(ItemType.DATASET, pattern, folder_path, settings, properties)


def upload_datasource(
    file_path: Optional[PathArg],
    folder_path: Optional[str],
    settings: Optional[SettingsArg],
    properties: Optional[Mapping[str, str]] = None,
) -> Any:
    """Upload a single shared data source (.rds) to ``folder_path``.

    The file is parsed and submitted through ``CreateDataSource`` rather than
    as a raw catalog item definition.
    """
    return _upload_file(ItemType.DATASOURCE, file_path, folder_path, settings, properties)


def upload_datasources(
    pattern: Optional[str],
    folder_path: Optional[str],
    settings: Optional[SettingsArg],
    properties: Optional[Mapping[str, str]] = None,
) -> List[Any]:
    return _upload_pattern(ItemType.DATASOURCE, pattern, folder_path, settings, properties)


def _upload_file(
    item_type: ItemType,
    file_path: Optional[PathArg],
    folder_path: Optional[str],
    settings: Optional[SettingsArg],
    properties: Optional[Mapping[str, str]],
) -> Any:
    require_text(file_path, "file_path")
    folder_path = require_text(folder_path, "folder_path")
    settings = resolve_settings(settings)

    request = SaveItemRequest(
        item_file_path=file_path,
        folder_path=folder_path,
        item_type=item_type,
        properties=dict(properties or {}),
    )
    return save_item(create_client(settings), request)


def _upload_pattern(
    item_type: ItemType,
    pattern: Optional[str],
    folder_path: Optional[str],
    settings: Optional[SettingsArg],
    properties: Optional[Mapping[str, str]],
) -> List[Any]:
    pattern = require_text(pattern, "pattern")
    folder_path = require_text(folder_path, "folder_path")
    settings = resolve_settings(settings)

    items: List[Any] = []
    file_paths = expand_pattern(pattern)
    if not file_paths:
        logger.warning(
            "No %s files found matching the pattern '%s'",
            item_type.value,
            pattern,
            extra={"pattern": pattern, "item_type": item_type.value},
        )
        return items

    client = create_client(settings)
    for file_path in file_paths:
        request = SaveItemRequest(
            item_file_path=file_path,
            folder_path=folder_path,
            item_type=item_type,
            properties=dict(properties or {}),
        )
        items.append(save_item(client, request))
    return items


def expand_pattern(pattern: str) -> List[Path]:
    """Return the files matching ``pattern``, sorted; ``**`` matches nested folders."""
    return [Path(match) for match in sorted(glob.glob(pattern, recursive=True)) if Path(match).is_file()]


def save_item(client: ReportingServiceClient, request: SaveItemRequest) -> Any:
    """Create or overwrite one catalog item from a local file."""
    request = require(request, "request")
    path = Path(request.item_file_path).resolve()
    if not path.is_file():
        raise FileNotFoundError(f"No such file: {path}")

    item_name = path.stem
    definition = path.read_bytes()
    properties = _writable_properties(request.properties)
    context = item_context(
        item_name, request.folder_path, item_type=request.item_type.value, endpoint=client.binding.endpoint
    )

    logger.info("Uploading %s to %s...", item_name, request.folder_path, extra=context)

    if request.item_type is ItemType.DATASOURCE:
        datasource = parse_datasource(definition)
        created = client.service.CreateDataSource(
            DataSource=item_name,
            Parent=request.folder_path,
            Overwrite=True,
            Definition=to_soap_definition(datasource),
            Properties=properties,
        )
        return _item_info(created)

    response = client.service.CreateCatalogItem(
        ItemType=request.item_type.value,
        Name=item_name,
        Parent=request.folder_path,
        Overwrite=True,
        Definition=definition,
        Properties=properties,
    )
    item = _item_info(response)

    _refresh_item_references(client, item)

    for warning in _array(getattr(response, "Warnings", None), "Warning"):
        logger.warning("%s", getattr(warning, "Message", warning), extra=context)

    return item


def _refresh_item_references(client: ReportingServiceClient, item: Any) -> None:
    """Resubmit the item's shared dataset references exactly as the server reports them."""
    references = _array(
        client.service.GetItemReferences(ItemPath=item.Path, ReferenceItemType=ItemType.DATASET.value),
        "ItemReferenceData",
    )
    updated = [{"Name": ref.Name, "Reference": ref.Reference} for ref in references]
    if updated:
        client.service.SetItemReferences(ItemPath=item.Path, ItemReferences={"ItemReference": updated})


def _find_item(client: ReportingServiceClient, request: FindItemRequest) -> Any:
    response = client.service.FindItems(
        Folder=request.folder,
        BooleanOperator="And",
        SearchOptions={"Property": [{"Name": "Recursive", "Value": str(bool(request.recursive))}]},
        SearchConditions={
            "SearchCondition": [
                {"Name": "Name", "Values": {"Value": [request.item_name]}, "Condition": "Equals"}
            ]
        },
    )
    items = _array(response, "CatalogItem")
    return items[0] if items else None


def _writable_properties(properties: Optional[Mapping[str, str]]) -> Optional[Dict[str, list]]:
    if not properties:
        return None
    return {
        "Property": [
            {"Name": name, "Value": value}
            for name, value in properties.items()
            if name.lower() not in READ_ONLY_PROPERTIES
        ]
    }


def _item_info(response: Any) -> Any:
    # CreateCatalogItem answers with ItemInfo and Warnings; the other calls return the item itself.
    item = getattr(response, "ItemInfo", None)
    return item if item is not None else response


def _array(value: Any, element: str) -> List[Any]:
    """Unwrap a SOAP ``ArrayOfX`` value into a plain list."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    inner = getattr(value, element, None)
    if inner is None:
        return []
    return list(inner) if isinstance(inner, (list, tuple)) else [inner]
