"""Validation error model.

Field errors point at one value inside a record, schema errors at the record as
a whole. Both accumulate in a ValidationErrors collection that is created
fresh for every validation run.
"""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, replace
from dataclasses import field as dataclass_field
from typing import Any

from .location import Location


class RuleDeclarationError(ValueError):
    """Raised when a rule or record declaration is malformed.

    This is a programmer error (negative interval, bad pattern, rule wired to a
    field of the wrong type) and is never collected as a validation error.
    """

    def __init__(self, message: str, record: str | None = None, field_name: str | None = None):
        self.record = record
        self.field_name = field_name
        prefix = ""
        if record:
            prefix = f"{record}.{field_name}: " if field_name else f"{record}: "
        super().__init__(f"{prefix}{message}")


class ValidationError:
    """Base for the two error variants."""

    is_field = False
    is_schema = False

    def to_dict(self, separator: str = "/", include_params: bool = True) -> dict[str, Any]:
        raise NotImplementedError


@dataclass
class FieldError(ValidationError):
    """A rule violation attributable to a single field.

    ``kind`` is the name of the rule that failed (or a custom tag). The rule
    engine leaves ``field`` and ``location`` empty; the record walker fills them
    in once it knows where the value lives.
    """
    kind: str
    message: str | None = None
    code: str | None = None
    params: dict[str, Any] = dataclass_field(default_factory=dict)
    field: str | None = None
    location: Location = dataclass_field(default_factory=Location)

    is_field = True

    @property
    def effective_code(self) -> str:
        """Declared code, falling back to the violation kind."""
        return self.code or self.kind

    def within(self, *segments: str | int) -> "FieldError":
        """Copy of this error re-rooted under parent location segments."""
        return replace(self, location=self.location.within(*segments))

    def for_field(self, name: str, location_name: str | None = None) -> "FieldError":
        """Copy of this error bound to the field that produced it."""
        return replace(
            self,
            field=self.field or name,
            location=self.location.within(location_name or name),
        )

    def with_overrides(self, code: str | None = None, message: str | None = None) -> "FieldError":
        """Copy with declared code/message taking precedence."""
        if code is None and message is None:
            return self
        return replace(
            self,
            code=code if code is not None else self.code,
            message=message if message is not None else self.message,
        )

    def to_dict(self, separator: str = "/", include_params: bool = True) -> dict[str, Any]:
        data: dict[str, Any] = {
            "location": self.location.render(separator),
            "type": self.kind,
        }
        if self.code is not None:
            data["code"] = self.code
        if self.message is not None:
            data["message"] = self.message
        if include_params and self.params:
            data["params"] = dict(self.params)
        return data

    def __str__(self) -> str:
        where = (self.field or "") if self.location.is_root else self.location.render()
        text = f"{where} [{self.kind}]"
        if self.code:
            text += f" code={self.code}"
        if self.message:
            text += f": {self.message}"
        return text


@dataclass
class SchemaError(ValidationError):
    """A violation of a whole-record rule."""
    name: str
    message: str | None = None

    is_schema = True

    def to_dict(self, separator: str = "/", include_params: bool = True) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name}
        if self.message is not None:
            data["message"] = self.message
        return data

    def __str__(self) -> str:
        if self.message:
            return f"[{self.name}]: {self.message}"
        return f"[{self.name}]"


def schema_error(name: str, message: str | None = None) -> SchemaError:
    """Build a single schema error."""
    return SchemaError(name, message)


@dataclass
class ValidationErrors:
    """Ordered, non-deduplicated collection of validation errors."""
    errors: list[ValidationError] = dataclass_field(default_factory=list)

    @classmethod
    def collect(cls, result: Any) -> "ValidationErrors":
        """Normalize what a hook returned into a collection.

        Accepts None, a single error, another collection, or an iterable of
        errors.
        """
        collected = cls()
        if result is None:
            return collected
        if isinstance(result, ValidationError):
            collected.add(result)
        elif isinstance(result, ValidationErrors):
            collected.extend(result)
        elif isinstance(result, Iterable) and not isinstance(result, (str, bytes)):
            for item in result:
                if not isinstance(item, ValidationError):
                    raise TypeError(f"expected a ValidationError, got {type(item).__name__}")
                collected.add(item)
        else:
            raise TypeError(f"cannot collect validation errors from {type(result).__name__}")
        return collected

    def add(self, error: ValidationError) -> None:
        """Append one error."""
        self.errors.append(error)

    def extend(self, errors: Iterable[ValidationError]) -> None:
        """Append many errors, preserving their order."""
        self.errors.extend(errors)

    def field_errors(self) -> list[FieldError]:
        return [error for error in self.errors if isinstance(error, FieldError)]

    def schema_errors(self) -> list[SchemaError]:
        return [error for error in self.errors if isinstance(error, SchemaError)]

    @property
    def failed(self) -> bool:
        """True when at least one error was recorded."""
        return bool(self.errors)

    def is_empty(self) -> bool:
        return not self.errors

    def to_list(self, separator: str = "/", include_params: bool = True) -> list[dict[str, Any]]:
        """Convert to JSON-serializable dictionaries for API error responses."""
        return [error.to_dict(separator, include_params) for error in self.errors]

    def __len__(self) -> int:
        return len(self.errors)

    def __iter__(self) -> Iterator[ValidationError]:
        return iter(self.errors)

    def __getitem__(self, position: int) -> ValidationError:
        return self.errors[position]


class ValidifyError(Exception):
    """Raised when a record fails validation; carries every accumulated error."""

    def __init__(self, errors: ValidationErrors, record_type: str | None = None):
        self.errors = errors
        self.record_type = record_type
        field_count = len(errors.field_errors())
        schema_count = len(errors.schema_errors())
        subject = f"{record_type} " if record_type else ""
        super().__init__(
            f"{subject}validation failed with {len(errors)} error(s): "
            f"{field_count} field, {schema_count} schema"
        )
