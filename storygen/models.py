"""Request and result schemas for story generation.

GenerationRequest is what the generator accepts; GenerationResult is what
the remote model must return. Pydantic validates both boundaries, and the
result model doubles as the JSON schema handed to the model provider.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Literal, get_args

from pydantic import BaseModel, ConfigDict, Field, ValidationError

Length = Literal["short", "medium", "long"]

LENGTHS: tuple[str, ...] = get_args(Length)
DEFAULT_LENGTH: Length = "medium"

# Target word-count range per requested length.
LENGTH_POLICY: Mapping[str, str] = MappingProxyType({
    "short": "200-300",
    "medium": "500-700",
    "long": "1000-1500",
})

OUTPUT_SCHEMA_NAME = "StorySchema"


class GenerationRequest(BaseModel):
    """One story request. Immutable once constructed."""

    model_config = ConfigDict(frozen=True, strict=True)

    topic: str = Field(min_length=1, description="The main topic or theme for the story")
    style: str | None = Field(
        default=None, description="Writing style (e.g., adventure, mystery, sci-fi)"
    )
    length: Length = DEFAULT_LENGTH


class GenerationResult(BaseModel):
    """A generated story as returned by the model provider."""

    model_config = ConfigDict(
        strict=True,
        extra="ignore",
        populate_by_name=True,
        json_schema_extra={"additionalProperties": False},
    )

    title: str
    genre: str
    story: str
    word_count: int | float = Field(alias="wordCount")
    themes: list[str]

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


def output_schema() -> dict[str, Any]:
    """JSON schema the model output must satisfy (fresh copy per call)."""
    return GenerationResult.model_json_schema(by_alias=True)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class RequestValidationError(ValueError):
    """Raised when a raw request does not describe a valid GenerationRequest."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field


class MissingField(RequestValidationError):
    def __init__(self, field: str) -> None:
        super().__init__(field, f"Missing required field: {field}")


class InvalidEnum(RequestValidationError):
    def __init__(self, field: str, value: Any, allowed: tuple[str, ...]) -> None:
        choices = ", ".join(allowed)
        super().__init__(field, f"Invalid value for {field}: {value!r} (expected one of: {choices})")
        self.value = value
        self.allowed = allowed


class InvalidField(RequestValidationError):
    def __init__(self, field: str, reason: str) -> None:
        super().__init__(field, f"Invalid value for {field}: {reason}")
        self.reason = reason


class ResultValidationError(ValueError):
    """Raised when model output does not conform to the output schema."""


# ---------------------------------------------------------------------------
# Validators
# ---------------------------------------------------------------------------

def validate_request(raw: Mapping[str, Any]) -> GenerationRequest:
    """Build a GenerationRequest from raw input fields.

    None counts as absent. Raises MissingField, InvalidEnum or InvalidField;
    the first offending field wins, checked in declaration order.
    """
    fields = {k: v for k, v in raw.items() if v is not None}
    try:
        return GenerationRequest.model_validate(fields)
    except ValidationError as e:
        raise _request_error(e) from e


def _request_error(exc: ValidationError) -> RequestValidationError:
    order = list(GenerationRequest.model_fields)
    errors = sorted(
        exc.errors(),
        key=lambda err: order.index(err["loc"][0]) if err["loc"] and err["loc"][0] in order else len(order),
    )
    err = errors[0]
    field = str(err["loc"][0]) if err["loc"] else "request"
    if err["type"] == "missing":
        return MissingField(field)
    if err["type"] == "literal_error":
        return InvalidEnum(field, err.get("input"), LENGTHS)
    if err["type"] == "string_too_short":
        return InvalidField(field, "must not be empty")
    return InvalidField(field, err["msg"])


def validate_result(value: Any) -> GenerationResult:
    """Check a model response against the output schema."""
    if value is None:
        raise ResultValidationError("Model returned no output")
    if not isinstance(value, Mapping):
        raise ResultValidationError(f"Model output must be an object, got {type(value).__name__}")
    try:
        return GenerationResult.model_validate(dict(value))
    except ValidationError as e:
        raise ResultValidationError(f"Model output does not match {OUTPUT_SCHEMA_NAME}: {e}") from e
