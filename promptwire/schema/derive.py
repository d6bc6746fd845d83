from __future__ import annotations

import copy
import json
from functools import lru_cache
from typing import Any

from pydantic import TypeAdapter, ValidationError
from pydantic.errors import PydanticUserError

from promptwire.errors import FieldMismatch, SchemaViolationError

_DEFS_PREFIX = "#/$defs/"


@lru_cache(maxsize=None)
def _adapter(output_type: Any) -> TypeAdapter:
    return TypeAdapter(output_type)


@lru_cache(maxsize=None)
def _schema(output_type: Any) -> dict[str, Any]:
    return inline_refs(_adapter(output_type).json_schema())


def derive_schema(output_type: Any) -> dict[str, Any]:
    """
    JSON Schema for `output_type`, generated from its definition alone.

    Every `$ref` into `$defs` is inlined so providers receive one
    self-contained object; only recursive definitions keep a `$defs` table.
    The result is computed once per type; callers get their own copy.
    """
    return copy.deepcopy(_schema(output_type))


def check_describable(output_type: Any) -> None:
    """Raise TypeError if `output_type` cannot be described as a JSON Schema."""
    try:
        _schema(output_type)
    except PydanticUserError as exc:
        raise TypeError(f"{type_name(output_type)} is not schema-describable: {exc}") from exc


def parse_output(output_type: Any, raw: Any) -> Any:
    """
    Deserialize a raw backend value into `output_type`.

    `str`/`bytes` are treated as JSON text; anything else as an already
    decoded JSON value, which is re-encoded first. Validation is strict:
    "5" is not an int and "yes" is not a bool.
    """
    adapter = _adapter(output_type)
    if isinstance(raw, (str, bytes, bytearray)):
        text = raw
    else:
        try:
            text = json.dumps(raw)
        except (TypeError, ValueError) as exc:
            raise SchemaViolationError(
                output=type_name(output_type),
                type_mismatches=[FieldMismatch(path="", message=str(exc), error_type="json_invalid")],
                raw=raw,
            ) from exc
    try:
        return adapter.validate_json(text, strict=True)
    except ValidationError as exc:
        raise violation_from(exc, output_type=output_type, raw=raw) from exc


def violation_from(exc: ValidationError, *, output_type: Any, raw: Any) -> SchemaViolationError:
    missing: list[str] = []
    unexpected: list[str] = []
    mismatches: list[FieldMismatch] = []
    for err in exc.errors(include_url=False):
        path = ".".join(str(p) for p in err["loc"])
        if err["type"] == "missing":
            missing.append(path)
        elif err["type"] == "extra_forbidden":
            unexpected.append(path)
        else:
            mismatches.append(FieldMismatch(path=path, message=err["msg"], error_type=err["type"]))
    return SchemaViolationError(
        output=type_name(output_type),
        missing_fields=missing,
        type_mismatches=mismatches,
        unexpected_fields=unexpected,
        raw=raw,
    )


def type_name(tp: Any) -> str:
    return getattr(tp, "__name__", None) or repr(tp)


def inline_refs(schema: dict[str, Any]) -> dict[str, Any]:
    defs: dict[str, Any] = schema.get("$defs", {})
    recursive: set[str] = set()

    def resolve(node: Any, stack: frozenset[str]) -> Any:
        if isinstance(node, list):
            return [resolve(v, stack) for v in node]
        if not isinstance(node, dict):
            return node
        ref = node.get("$ref")
        if isinstance(ref, str) and ref.startswith(_DEFS_PREFIX):
            name = ref[len(_DEFS_PREFIX) :]
            if name in stack:
                recursive.add(name)
                return dict(node)
            target = resolve(defs[name], stack | {name})
            siblings = {k: resolve(v, stack) for k, v in node.items() if k != "$ref"}
            return {**target, **siblings}
        return {k: resolve(v, stack) for k, v in node.items() if k != "$defs"}

    out = resolve(schema, frozenset())
    kept: dict[str, Any] = {}
    # Resolving a kept definition can uncover further recursive names.
    while recursive - kept.keys():
        for name in sorted(recursive - kept.keys()):
            kept[name] = resolve(defs[name], frozenset({name}))
    if kept:
        out["$defs"] = {name: kept[name] for name in sorted(kept)}
    return out
