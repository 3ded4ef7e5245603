# src/validation/validator.py — v1
"""Schema validation of agent inputs (and capability outputs).

Schemas are pydantic models: required fields, types, Literal/Enum
membership, ``min_length`` on strings and lists, ``ge``/``le``/``gt``/``lt``
ranges. Pydantic error records are rendered as one message per violation,
prefixed with the dotted path of the field, e.g.::

    paper.title: expected non-empty string
    papers.0.year: expected integer

Agents can attach semantic checks that run once the schema itself passes.
"""

from __future__ import annotations

from typing import Any, Callable, Generic, Sequence, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from papermind.core.errors import InputValidationError
from papermind.core.models import ValidationResult

M = TypeVar("M", bound=BaseModel)

# A semantic check receives the parsed model and returns path-prefixed messages.
Check = Callable[[Any], list[str]]

_TYPE_MESSAGES: dict[str, str] = {
    "string_type": "expected string",
    "int_type": "expected integer",
    "int_parsing": "expected integer",
    "int_from_float": "expected integer",
    "float_type": "expected number",
    "float_parsing": "expected number",
    "bool_type": "expected boolean",
    "bool_parsing": "expected boolean",
    "list_type": "expected array",
    "dict_type": "expected object",
    "model_type": "expected object",
    "model_attributes_type": "expected object",
}

_BOUND_MESSAGES: dict[str, tuple[str, str]] = {
    "greater_than_equal": ("ge", ">="),
    "less_than_equal": ("le", "<="),
    "greater_than": ("gt", ">"),
    "less_than": ("lt", "<"),
}


def format_path(loc: Sequence[str | int]) -> str:
    """Render a pydantic error location as a dotted path."""
    return ".".join(str(part) for part in loc) or "input"


def format_bound(value: Any) -> str:
    """Render a numeric bound the same way whether pydantic reports 10 or 10.0."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return f"{value:g}"
    return str(value)


def describe_error(error: dict[str, Any]) -> str:
    """Turn one pydantic error record into a short constraint message."""
    kind = error.get("type", "")
    ctx = error.get("ctx") or {}

    if kind == "missing":
        return "required field missing"
    if kind == "string_too_short":
        n = ctx.get("min_length", 1)
        return "expected non-empty string" if n <= 1 else f"expected string of at least {n} characters"
    if kind == "string_too_long":
        return f"expected string of at most {ctx.get('max_length')} characters"
    if kind == "too_short":
        n = ctx.get("min_length", 1)
        return "expected non-empty array" if n <= 1 else f"expected at least {n} items"
    if kind == "too_long":
        return f"expected at most {ctx.get('max_length')} items"
    if kind in ("literal_error", "enum"):
        return f"expected one of: {ctx.get('expected', '')}"
    if kind in _BOUND_MESSAGES:
        name, op = _BOUND_MESSAGES[kind]
        return f"expected value {op} {format_bound(ctx.get(name))}"
    if kind in _TYPE_MESSAGES:
        return _TYPE_MESSAGES[kind]
    return str(error.get("msg", "invalid value"))


def format_errors(exc: PydanticValidationError) -> list[str]:
    """Render every violation of a pydantic ValidationError."""
    return [
        f"{format_path(err['loc'])}: {describe_error(err)}"
        for err in exc.errors(include_url=False)
    ]


def _as_data(payload: Any) -> Any:
    if isinstance(payload, BaseModel):
        return payload.model_dump()
    return payload


class Validator(Generic[M]):
    """Validates payloads against one pydantic schema plus optional checks.

    Args:
        schema: Pydantic model class describing the payload.
        checks: Semantic checks run on the parsed model when the schema passes.
    """

    def __init__(self, schema: type[M], checks: Sequence[Check] | None = None) -> None:
        self._schema = schema
        self._checks = list(checks or [])

    @property
    def schema(self) -> type[M]:
        return self._schema

    def validate(self, payload: Any) -> ValidationResult:
        """Check payload; never raises for invalid input."""
        try:
            self.parse(payload)
        except InputValidationError as exc:
            return ValidationResult(valid=False, errors=exc.errors)
        return ValidationResult(valid=True, errors=[])

    def parse(self, payload: Any) -> M:
        """Return the parsed model.

        Raises:
            InputValidationError: With one message per violated constraint.
        """
        try:
            model = self._schema.model_validate(_as_data(payload))
        except PydanticValidationError as exc:
            raise InputValidationError(format_errors(exc)) from exc

        errors: list[str] = []
        for check in self._checks:
            errors.extend(check(model))
        if errors:
            raise InputValidationError(errors)
        return model


def validate_input(
    payload: Any,
    schema: type[BaseModel],
    checks: Sequence[Check] | None = None,
) -> ValidationResult:
    """Validate payload against schema. Pure function over its arguments."""
    return Validator(schema, checks).validate(payload)
