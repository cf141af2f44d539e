"""Evaluation of a single rule against a single field value.

The engine knows nothing about where a value lives. Errors it returns carry
the rule's kind, parameters and declared overrides; the record walker binds
them to a field and a location.
"""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from decimal import Decimal
from numbers import Real
from types import MappingProxyType
from typing import Any

from ..errors import FieldError, ValidationErrors
from ..location import Location
from . import formats
from .catalog import (
    CustomModifier,
    CustomValidator,
    IpFormat,
    Rule,
    RuleKind,
)
from .timing import check_time

logger = logging.getLogger(__name__)

_SEQUENCE_TYPES = (list, tuple, set, frozenset)


@dataclass(frozen=True)
class Outcome:
    """Result of evaluating one rule."""
    value: Any = None
    replaced: bool = False
    errors: tuple[FieldError, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.errors

    @classmethod
    def unchanged(cls, value: Any = None) -> "Outcome":
        return cls(value=value)

    @classmethod
    def replace(cls, value: Any) -> "Outcome":
        return cls(value=value, replaced=True)

    @classmethod
    def failed(cls, *errors: FieldError) -> "Outcome":
        return cls(errors=tuple(errors))


def violation(rule: Rule, value: Any, location: Location | None = None, **params: Any) -> FieldError:
    """Build the default error for ``rule``, honouring declared overrides."""
    return FieldError(
        kind=rule.name,
        code=rule.code,
        message=rule.message,
        params={"value": value, **rule.params(), **params},
        location=location or Location(),
    )


def _map_elements(value: Any, function: Callable[[Any], Any]) -> Any:
    if isinstance(value, _SEQUENCE_TYPES):
        return type(value)(function(item) for item in value)
    return function(value)


def _require_str(rule: Rule, value: Any) -> None:
    if not isinstance(value, str):
        raise TypeError(f"{rule.name} requires a string value, got {type(value).__name__}")


# Modifiers

def _string_modifier(transform: Callable[[str], str]):
    def evaluate_modifier(rule: Rule, field_name: str, value: Any, record: Any) -> Outcome:
        def apply(item: Any) -> str:
            _require_str(rule, item)
            return transform(item)
        return Outcome.replace(_map_elements(value, apply))
    return evaluate_modifier


def _capitalize(text: str) -> str:
    # Only the first character changes; str.capitalize would lowercase the rest
    return text[:1].upper() + text[1:]


def _custom_modifier(rule: CustomModifier, field_name: str, value: Any, record: Any) -> Outcome:
    def apply(item: Any) -> Any:
        result = rule.function(item)
        return item if result is None else result
    return Outcome.replace(_map_elements(value, apply))


def _validify(rule: Rule, field_name: str, value: Any, record: Any) -> Outcome:
    # Nested records are walked by the record walker, not evaluated here
    return Outcome.unchanged(value)


# Validators

def _predicate(check: Callable[[Rule, Any], bool], element_wise: bool = True):
    """Wrap a value predicate, checking sequence elements one by one."""
    def evaluate_validator(rule: Rule, field_name: str, value: Any, record: Any) -> Outcome:
        if element_wise and isinstance(value, (list, tuple)):
            errors = [
                violation(rule, item, Location((position,)))
                for position, item in enumerate(value)
                if not check(rule, item)
            ]
            return Outcome.failed(*errors) if errors else Outcome.unchanged(value)
        if check(rule, value):
            return Outcome.unchanged(value)
        return Outcome.failed(violation(rule, value))
    return evaluate_validator


def _string_check(predicate: Callable[[str], bool]) -> Callable[[Rule, Any], bool]:
    def check(rule: Rule, value: Any) -> bool:
        _require_str(rule, value)
        return predicate(value)
    return check


def _check_length(rule, value) -> bool:
    if not hasattr(value, "__len__"):
        raise TypeError(f"length requires a sized value, got {type(value).__name__}")
    size = len(value)
    if rule.equal is not None and size != rule.equal:
        return False
    if rule.min is not None and size < rule.min:
        return False
    if rule.max is not None and size > rule.max:
        return False
    return True


def _check_range(rule, value) -> bool:
    if isinstance(value, bool) or not isinstance(value, (Real, Decimal)):
        raise TypeError(f"range requires a numeric value, got {type(value).__name__}")
    if rule.min is not None and value < rule.min:
        return False
    if rule.max is not None and value > rule.max:
        return False
    return True


def _check_ip(rule, value) -> bool:
    _require_str(rule, value)
    version = {IpFormat.V4: 4, IpFormat.V6: 6}.get(rule.format)
    return formats.is_ip(value, version)


def _check_regex(rule, value) -> bool:
    _require_str(rule, value)
    return rule.pattern.search(value) is not None


def _contains(container: Any, needle: Any) -> bool:
    if isinstance(container, Mapping):
        return needle in container.keys()
    return needle in container


def _check_contains(rule, value) -> bool:
    return _contains(value, rule.value)


def _check_contains_not(rule, value) -> bool:
    return not _contains(value, rule.value)


def _check_is_in(rule, value) -> bool:
    return any(value == allowed for allowed in rule.collection)


def _check_not_in(rule, value) -> bool:
    return not any(value == disallowed for disallowed in rule.collection)


def _must_match(rule, field_name: str, value: Any, record: Any) -> Outcome:
    if record is None:
        raise TypeError(f"must_match on {field_name!r} needs the enclosing record")
    other = getattr(record, rule.other)
    if value == other:
        return Outcome.unchanged(value)
    return Outcome.failed(violation(rule, value, other_value=other))


def _required(rule, field_name: str, value: Any, record: Any) -> Outcome:
    if value is None:
        return Outcome.failed(violation(rule, None))
    return Outcome.unchanged(value)


def _custom_validator(rule: CustomValidator, field_name: str, value: Any, record: Any) -> Outcome:
    result = rule.function(value)
    errors = []
    for error in ValidationErrors.collect(result):
        if not isinstance(error, FieldError):
            raise TypeError(
                f"custom validator for {field_name!r} returned a {type(error).__name__}; "
                "field validators must return FieldError instances"
            )
        errors.append(error.with_overrides(rule.code, rule.message))
    return Outcome.failed(*errors) if errors else Outcome.unchanged(value)


Evaluator = Callable[[Rule, str, Any, Any], Outcome]

EVALUATORS: Mapping[RuleKind, Evaluator] = MappingProxyType({
    RuleKind.TRIM: _string_modifier(str.strip),
    RuleKind.UPPERCASE: _string_modifier(str.upper),
    RuleKind.LOWERCASE: _string_modifier(str.lower),
    RuleKind.CAPITALIZE: _string_modifier(_capitalize),
    RuleKind.VALIDIFY: _validify,
    RuleKind.LENGTH: _predicate(_check_length, element_wise=False),
    RuleKind.RANGE: _predicate(_check_range),
    RuleKind.EMAIL: _predicate(_string_check(formats.is_email)),
    RuleKind.URL: _predicate(_string_check(formats.is_url)),
    RuleKind.NON_CONTROL_CHAR: _predicate(_string_check(formats.has_no_control_chars)),
    RuleKind.CREDIT_CARD: _predicate(_string_check(formats.is_credit_card)),
    RuleKind.PHONE: _predicate(_string_check(formats.is_phone)),
    RuleKind.IP: _predicate(_check_ip),
    RuleKind.MUST_MATCH: _must_match,
    RuleKind.CONTAINS: _predicate(_check_contains, element_wise=False),
    RuleKind.CONTAINS_NOT: _predicate(_check_contains_not, element_wise=False),
    RuleKind.IS_IN: _predicate(_check_is_in, element_wise=False),
    RuleKind.NOT_IN: _predicate(_check_not_in, element_wise=False),
    RuleKind.REGEX: _predicate(_check_regex),
    RuleKind.REQUIRED: _required,
    RuleKind.TIME: _predicate(check_time),
})

# Both custom rules share the ``custom`` kind; dispatch them by class
_CUSTOM_EVALUATORS: Mapping[type, Evaluator] = MappingProxyType({
    CustomModifier: _custom_modifier,
    CustomValidator: _custom_validator,
})


def evaluate(rule: Rule, field_name: str, value: Any, record: Any = None) -> Outcome:
    """Apply one rule to one present value.

    Absent values (None) are only ever passed to ``required``; the walker
    skips every other rule for them.
    """
    evaluator = _CUSTOM_EVALUATORS.get(type(rule)) or EVALUATORS.get(rule.kind)
    if evaluator is None:
        raise KeyError(f"no evaluator registered for rule kind {rule.kind!r}")
    outcome = evaluator(rule, field_name, value, record)
    if outcome.errors:
        logger.debug(f"Rule {rule.name} failed on {field_name} with {len(outcome.errors)} error(s)")
    return outcome

