"""YAML reading and writing for plan and history documents."""

from __future__ import annotations

from typing import Any

import yaml
from pydantic import BaseModel, ValidationError

from pwf.schema.history import History
from pwf.schema.plan import Plan


TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"


class DocumentLoader(yaml.SafeLoader):
    """SafeLoader that leaves unquoted dates and timestamps as strings."""


DocumentLoader.yaml_implicit_resolvers = {
    first: [(tag, pattern) for tag, pattern in resolvers if tag != TIMESTAMP_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


class DocumentParseError(ValueError):
    """Raised when a document is not valid YAML or does not match the schema."""

    pass


def _load_mapping(text: str, kind: str) -> dict[str, Any]:
    try:
        data = yaml.load(text, Loader=DocumentLoader)
    except yaml.YAMLError as e:
        raise DocumentParseError(f"YAML syntax error: {e}") from e

    if not isinstance(data, dict):
        raise DocumentParseError(f"{kind} document must be a YAML mapping")
    return data


def _format_validation_error(error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first["loc"])
    if first["type"] == "missing":
        return f"Missing required field: {location}"
    return f"Invalid value for {location}: {first['msg']}"


def parse_plan(text: str) -> Plan:
    """Parse YAML text into a Plan.

    Args:
        text: Plan document as YAML

    Returns:
        Parsed Plan

    Raises:
        DocumentParseError: If the YAML is malformed or does not match the schema
    """
    data = _load_mapping(text, "Plan")
    try:
        return Plan.model_validate(data)
    except ValidationError as e:
        raise DocumentParseError(_format_validation_error(e)) from e


def parse_history(text: str) -> History:
    """Parse YAML text into a History export.

    Raises:
        DocumentParseError: If the YAML is malformed or does not match the schema
    """
    data = _load_mapping(text, "History")
    try:
        return History.model_validate(data)
    except ValidationError as e:
        raise DocumentParseError(_format_validation_error(e)) from e


def _prune(value: Any) -> Any:
    if isinstance(value, dict):
        pruned = {key: _prune(item) for key, item in value.items()}
        return {key: item for key, item in pruned.items() if item is not None and item != [] and item != {}}
    if isinstance(value, list):
        return [_prune(item) for item in value]
    return value


def to_document_dict(model: BaseModel) -> dict[str, Any]:
    """Dump a model to plain data, dropping absent values and empty collections."""
    return _prune(model.model_dump(mode="json", by_alias=True, exclude_none=True))


def dump_document(model: BaseModel) -> str:
    """Serialize a Plan or History (or any sub-record) to YAML."""
    return yaml.safe_dump(
        to_document_dict(model),
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
    )
