"""Built-in rule catalog.

Rules are plain descriptions: a kind, its parameters and an optional
code/message override. Behaviour lives in :mod:`validify.rules.engine`.
Parameter problems are reported when the rule is declared, not when a value
is checked.
"""

import re
from collections.abc import Callable, Collection
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any, ClassVar

from ..errors import RuleDeclarationError


class RuleKind(str, Enum):
    """Names of every built-in rule; also the default violation tag."""
    TRIM = "trim"
    UPPERCASE = "uppercase"
    LOWERCASE = "lowercase"
    CAPITALIZE = "capitalize"
    CUSTOM = "custom"
    VALIDIFY = "validify"
    LENGTH = "length"
    RANGE = "range"
    EMAIL = "email"
    URL = "url"
    NON_CONTROL_CHAR = "non_control_char"
    CREDIT_CARD = "credit_card"
    PHONE = "phone"
    IP = "ip"
    MUST_MATCH = "must_match"
    CONTAINS = "contains"
    CONTAINS_NOT = "contains_not"
    IS_IN = "is_in"
    NOT_IN = "not_in"
    REGEX = "regex"
    REQUIRED = "required"
    TIME = "time"


class IpFormat(str, Enum):
    V4 = "v4"
    V6 = "v6"


class TimeOp(str, Enum):
    """Comparison operators for the time rule."""
    BEFORE = "before"
    AFTER = "after"
    BEFORE_NOW = "before_now"
    AFTER_NOW = "after_now"
    BEFORE_FROM_NOW = "before_from_now"
    AFTER_FROM_NOW = "after_from_now"
    IN_PERIOD = "in_period"

    @property
    def from_now(self) -> bool:
        return self in (TimeOp.BEFORE_FROM_NOW, TimeOp.AFTER_FROM_NOW)

    @property
    def needs_target(self) -> bool:
        return self in (TimeOp.BEFORE, TimeOp.AFTER)

    @property
    def needs_interval(self) -> bool:
        return self.from_now or self is TimeOp.IN_PERIOD


@dataclass(frozen=True)
class Rule:
    """One modification or validation applied to one field."""
    kind: ClassVar[RuleKind]
    modifier: ClassVar[bool] = False

    code: str | None = field(default=None, kw_only=True)
    message: str | None = field(default=None, kw_only=True)

    @property
    def name(self) -> str:
        return self.kind.value

    def params(self) -> dict[str, Any]:
        """Declared parameters reported alongside a violation."""
        return {}


# Modifiers

@dataclass(frozen=True)
class Trim(Rule):
    kind = RuleKind.TRIM
    modifier = True


@dataclass(frozen=True)
class Uppercase(Rule):
    kind = RuleKind.UPPERCASE
    modifier = True


@dataclass(frozen=True)
class Lowercase(Rule):
    kind = RuleKind.LOWERCASE
    modifier = True


@dataclass(frozen=True)
class Capitalize(Rule):
    kind = RuleKind.CAPITALIZE
    modifier = True


@dataclass(frozen=True)
class CustomModifier(Rule):
    """Run ``function`` on the value (on each element for sequence fields).

    The function returns the replacement value. Returning None keeps the
    current value, which lets a function mutate a mutable value in place.
    """
    function: Callable[[Any], Any]

    kind = RuleKind.CUSTOM
    modifier = True


@dataclass(frozen=True)
class Validify(Rule):
    """Descend into a nested validatable record (or each record of a sequence)."""
    kind = RuleKind.VALIDIFY
    modifier = True


# Validators

@dataclass(frozen=True)
class Length(Rule):
    min: int | None = None
    max: int | None = None
    equal: int | None = None

    kind = RuleKind.LENGTH

    def __post_init__(self):
        bounds = [bound for bound in (self.min, self.max, self.equal) if bound is not None]
        if not bounds:
            raise RuleDeclarationError("length requires at least one of min, max or equal")
        if any(bound < 0 for bound in bounds):
            raise RuleDeclarationError("length bounds must be non-negative")
        if self.min is not None and self.max is not None and self.min > self.max:
            raise RuleDeclarationError(f"length min ({self.min}) is greater than max ({self.max})")

    def params(self) -> dict[str, Any]:
        return _present(min=self.min, max=self.max, equal=self.equal)


@dataclass(frozen=True)
class Range(Rule):
    min: float | None = None
    max: float | None = None

    kind = RuleKind.RANGE

    def __post_init__(self):
        if self.min is None and self.max is None:
            raise RuleDeclarationError("range requires at least one of min or max")
        if self.min is not None and self.max is not None and self.min > self.max:
            raise RuleDeclarationError(f"range min ({self.min}) is greater than max ({self.max})")

    def params(self) -> dict[str, Any]:
        return _present(min=self.min, max=self.max)


@dataclass(frozen=True)
class Email(Rule):
    kind = RuleKind.EMAIL


@dataclass(frozen=True)
class Url(Rule):
    kind = RuleKind.URL


@dataclass(frozen=True)
class NonControlChar(Rule):
    kind = RuleKind.NON_CONTROL_CHAR


@dataclass(frozen=True)
class CreditCard(Rule):
    kind = RuleKind.CREDIT_CARD


@dataclass(frozen=True)
class Phone(Rule):
    kind = RuleKind.PHONE


@dataclass(frozen=True)
class Ip(Rule):
    format: IpFormat | None = None

    kind = RuleKind.IP

    def __post_init__(self):
        if self.format is not None:
            try:
                object.__setattr__(self, "format", IpFormat(self.format))
            except ValueError:
                raise RuleDeclarationError(f"unknown ip format: {self.format!r}") from None

    def params(self) -> dict[str, Any]:
        return _present(format=self.format.value if self.format else None)


@dataclass(frozen=True)
class MustMatch(Rule):
    """Fail unless the value equals the sibling field ``other``."""
    other: str

    kind = RuleKind.MUST_MATCH

    def params(self) -> dict[str, Any]:
        return {"other": self.other}


@dataclass(frozen=True)
class Contains(Rule):
    value: Any

    kind = RuleKind.CONTAINS

    def params(self) -> dict[str, Any]:
        return {"needle": self.value}


@dataclass(frozen=True)
class ContainsNot(Rule):
    value: Any

    kind = RuleKind.CONTAINS_NOT

    def params(self) -> dict[str, Any]:
        return {"needle": self.value}


@dataclass(frozen=True)
class IsIn(Rule):
    collection: Collection[Any]

    kind = RuleKind.IS_IN


@dataclass(frozen=True)
class NotIn(Rule):
    collection: Collection[Any]

    kind = RuleKind.NOT_IN


@dataclass(frozen=True)
class Regex(Rule):
    """Fail unless the pattern matches the string (``re.search`` semantics)."""
    pattern: re.Pattern[str] | str

    kind = RuleKind.REGEX

    def __post_init__(self):
        if isinstance(self.pattern, str):
            try:
                object.__setattr__(self, "pattern", re.compile(self.pattern))
            except re.error as e:
                raise RuleDeclarationError(f"invalid regex {self.pattern!r}: {e}") from e

    def params(self) -> dict[str, Any]:
        return {"pattern": self.pattern.pattern}


@dataclass(frozen=True)
class Required(Rule):
    """Fail when an optional field is absent. The only rule that sees None."""
    kind = RuleKind.REQUIRED


@dataclass(frozen=True)
class CustomValidator(Rule):
    """Run ``function`` on the value.

    The function returns None on success, or one FieldError (or an iterable
    of them) describing the violations.
    """
    function: Callable[[Any], Any]

    kind = RuleKind.CUSTOM


@dataclass(frozen=True)
class Time(Rule):
    """Compare a date/time value against a literal, a function or now.

    ``target`` is either a literal string parsed with ``format`` or a
    zero-argument callable returning the comparison value. ``interval`` is
    required by the ``*_from_now`` operators and ``in_period``.
    """
    op: TimeOp
    target: str | date | Callable[[], date] | None = None
    format: str | None = None
    interval: timedelta | None = None
    inclusive: bool | None = None

    kind = RuleKind.TIME

    def __post_init__(self):
        try:
            op = TimeOp(self.op)
        except ValueError:
            raise RuleDeclarationError(f"unknown time operator: {self.op!r}") from None
        object.__setattr__(self, "op", op)

        if isinstance(self.target, str):
            if not self.format:
                raise RuleDeclarationError("a literal time target requires a format")
            try:
                parsed = datetime.strptime(self.target, self.format)
            except ValueError as e:
                raise RuleDeclarationError(
                    f"time target {self.target!r} does not match format {self.format!r}: {e}"
                ) from e
            object.__setattr__(self, "target", parsed)

        if op.needs_target and self.target is None:
            raise RuleDeclarationError(f"time operator {op.value} requires a target")

        if op.needs_interval:
            if self.interval is None:
                raise RuleDeclarationError(f"time operator {op.value} requires an interval")
            if op.from_now and self.interval < timedelta(0):
                raise RuleDeclarationError(
                    f"time operator {op.value} does not accept a negative interval ({self.interval})"
                )

        if self.inclusive is None:
            object.__setattr__(self, "inclusive", op.from_now)

    def params(self) -> dict[str, Any]:
        target = None if callable(self.target) else self.target
        return _present(op=self.op.value, target=target, interval=self.interval)


MODIFIERS = (Trim, Uppercase, Lowercase, Capitalize, CustomModifier, Validify)
VALIDATORS = (
    Length, Range, Email, Url, NonControlChar, CreditCard, Phone, Ip, MustMatch,
    Contains, ContainsNot, IsIn, NotIn, Regex, Required, CustomValidator, Time,
)
STRING_MODIFIERS = (Trim, Uppercase, Lowercase, Capitalize)


def _present(**params: Any) -> dict[str, Any]:
    return {key: value for key, value in params.items() if value is not None}
