from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Tuple, Union

from jsonschema import Draft7Validator
from jsonschema.exceptions import ValidationError as JSONSchemaError

from ..models.exceptions import SchemaError


_SCHEMA_CACHE: Dict[str, Draft7Validator] = {}

PathItem = Union[str, int]


def _schema_path(name: str) -> Path:
    current_path = Path(__file__).resolve()

    # Look for the guardrails directory by traversing up the directory tree
    for parent in [current_path.parent] + list(current_path.parents):
        guardrails_path = parent / "guardrails"
        if guardrails_path.exists():
            return guardrails_path / name
    return current_path.parent.parent / "guardrails" / name


def _load_schema(name: str) -> Draft7Validator:
    if name in _SCHEMA_CACHE:
        return _SCHEMA_CACHE[name]

    with open(_schema_path(name), "r", encoding="utf-8") as f:
        schema = json.load(f)
    Draft7Validator.check_schema(schema)
    validator = Draft7Validator(schema)
    _SCHEMA_CACHE[name] = validator
    return validator


def response_format_schema(name: str) -> Dict[str, Any]:
    """The contract as sent to the model: a copy without draft metadata."""
    schema = copy.deepcopy(_load_schema(name).schema)
    schema.pop("$schema", None)
    schema.pop("title", None)
    return schema


def format_field(path: Iterable[PathItem]) -> str:
    out = ""
    for item in path:
        if isinstance(item, int):
            out += f"[{item}]"
        else:
            out += f".{item}" if out else item
    return out or "$"


def _error_field(error: JSONSchemaError) -> Tuple[Tuple[PathItem, ...], str]:
    base = tuple(error.absolute_path)
    if error.validator == "required" and isinstance(error.instance, dict):
        missing = [k for k in error.validator_value if k not in error.instance]
        if missing:
            return base + (missing[0],), "required field is missing"
    if error.validator == "additionalProperties" and isinstance(error.instance, dict):
        known = error.schema.get("properties", {})
        extra = [k for k in error.instance if k not in known]
        if extra:
            return base + (extra[0],), "unexpected field"
    if error.validator == "type":
        return base, f"expected {error.validator_value}, got {type(error.instance).__name__}"
    return base, error.message


def _order_key(schema: Dict[str, Any], path: Tuple[PathItem, ...]) -> Tuple[int, ...]:
    """Rank a field path by declaration order in the schema."""
    key: List[int] = []
    node: Any = schema
    for item in path:
        if isinstance(item, int):
            key.append(item)
            node = node.get("items", {}) if isinstance(node, dict) else {}
            continue
        props = node.get("properties", {}) if isinstance(node, dict) else {}
        names = list(props)
        key.append(names.index(item) if item in names else len(names))
        node = props.get(item, {})
    return tuple(key)


def validate_contract(name: str, payload: Any) -> None:
    """Validate ``payload`` against guardrails contract ``name``.

    Raises SchemaError naming the first offending field in declaration order.
    """
    validator = _load_schema(name)
    errors = list(validator.iter_errors(payload))
    if not errors:
        return
    located = [_error_field(e) for e in errors]
    path, reason = min(located, key=lambda pr: (_order_key(validator.schema, pr[0]), len(pr[0])))
    contract = name.rsplit(".", 1)[0]
    raise SchemaError(contract, format_field(path), reason)
