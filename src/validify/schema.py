"""Rule declarations for record types.

Records are dataclasses whose fields carry an ordered rule list::

    @validatable(schema=check_dates)
    @dataclass
    class Signup:
        name: str = field_rules(Trim(), Capitalize(), Length(min=1, max=40))
        email: str | None = field_rules(Trim(), Lowercase(), Email(), default=None)
        tags: list[Tag] = field_rules(Validify(), default_factory=list)

The first time a record type is validated its declarations are turned into a
RecordSchema and cached on the class, so the work happens once per type.
"""

import collections.abc
import dataclasses
import logging
import types
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, Union, get_args, get_origin, get_type_hints

from .errors import RuleDeclarationError
from .rules.catalog import STRING_MODIFIERS, MustMatch, Required, Rule, Validify

logger = logging.getLogger(__name__)

METADATA_KEY = "validify"
SCHEMA_ATTRIBUTE = "__validify_schema__"
HOOKS_ATTRIBUTE = "__validify_hooks__"

_SEQUENCE_ORIGINS = (
    list, set, frozenset,
    collections.abc.Sequence, collections.abc.MutableSequence,
    collections.abc.Set, collections.abc.MutableSet,
)

SchemaValidator = Callable[[Any], Any]


@dataclass(frozen=True)
class FieldRules:
    """What ``field_rules()`` stores in a dataclass field's metadata."""
    rules: tuple[Rule, ...]
    alias: str | None = None


def field_rules(*declared: Rule, alias: str | None = None, **field_options: Any) -> Any:
    """Declare a record field with its ordered rule list.

    Args:
        *declared: Modifiers and validators, in application order
        alias: Serialized field name, used for payload keys and error locations
        **field_options: Passed through to ``dataclasses.field`` (default, ...)

    Returns:
        A dataclass field carrying the rules in its metadata
    """
    for rule in declared:
        if not isinstance(rule, Rule):
            raise RuleDeclarationError(f"expected a Rule, got {rule!r}")
    metadata = dict(field_options.pop("metadata", None) or {})
    metadata[METADATA_KEY] = FieldRules(tuple(declared), alias)
    return dataclasses.field(metadata=metadata, **field_options)


@dataclass(frozen=True)
class FieldSpec:
    """Resolved declaration of one record field."""
    name: str
    alias: str | None
    value_type: Any
    item_type: Any | None
    optional: bool
    modifiers: tuple[Rule, ...] = ()
    validators: tuple[Rule, ...] = ()
    nested: bool = False

    @property
    def location_name(self) -> str:
        return self.alias or self.name

    @property
    def sequence(self) -> bool:
        return self.item_type is not None

    @property
    def nested_type(self) -> Any:
        """Record type walked for nested fields."""
        return self.item_type if self.sequence else self.value_type


@dataclass(frozen=True)
class RecordSchema:
    """Every field declaration of a record type, in declaration order."""
    record_type: type
    fields: tuple[FieldSpec, ...]
    schema_validators: tuple[SchemaValidator, ...] = ()

    @property
    def name(self) -> str:
        return self.record_type.__name__

    def field(self, name: str) -> FieldSpec:
        for spec in self.fields:
            if spec.name == name:
                return spec
        raise KeyError(f"{self.name} has no field {name!r}")

    @classmethod
    def build(cls, record_type: type) -> "RecordSchema":
        """Resolve a dataclass's rule declarations.

        Raises:
            RuleDeclarationError: If a rule is wired to a field it cannot apply to
        """
        if not dataclasses.is_dataclass(record_type):
            raise RuleDeclarationError(f"{record_type!r} is not a dataclass")

        record_name = record_type.__name__
        hints = get_type_hints(record_type)
        field_names = {f.name for f in dataclasses.fields(record_type)}
        frozen = record_type.__dataclass_params__.frozen

        specs = []
        for data_field in dataclasses.fields(record_type):
            if not data_field.init:
                continue
            declared = data_field.metadata.get(METADATA_KEY) or FieldRules(())
            value_type, optional = _unwrap_optional(hints.get(data_field.name, Any))
            spec = FieldSpec(
                name=data_field.name,
                alias=declared.alias,
                value_type=value_type,
                item_type=_item_type(value_type),
                optional=optional,
                modifiers=tuple(r for r in declared.rules if r.modifier and not isinstance(r, Validify)),
                validators=tuple(r for r in declared.rules if not r.modifier),
                nested=any(isinstance(r, Validify) for r in declared.rules),
            )
            _check_field(spec, record_name, field_names, frozen)
            specs.append(spec)

        hooks = _inherited_hooks(record_type)
        logger.debug(f"Built schema for {record_name}: {len(specs)} fields, {len(hooks)} schema validators")
        return cls(record_type, tuple(specs), hooks)


def _inherited_hooks(record_type: type) -> tuple[SchemaValidator, ...]:
    # Base class hooks run first; a hook shared by several classes runs once
    hooks: list[SchemaValidator] = []
    for klass in reversed(record_type.__mro__):
        for hook in klass.__dict__.get(HOOKS_ATTRIBUTE, ()):
            if hook not in hooks:
                hooks.append(hook)
    return tuple(hooks)


def _unwrap_optional(hint: Any) -> tuple[Any, bool]:
    if get_origin(hint) in (Union, types.UnionType):
        args = get_args(hint)
        present = tuple(arg for arg in args if arg is not type(None))
        if len(present) < len(args):
            inner = present[0] if len(present) == 1 else Union[present]
            return inner, True
    return hint, False


def _item_type(hint: Any) -> Any | None:
    if hint in (list, set, frozenset, tuple):
        return Any
    origin = get_origin(hint)
    args = get_args(hint)
    if origin in _SEQUENCE_ORIGINS:
        return args[0] if args else Any
    if origin is tuple and len(args) == 2 and args[1] is Ellipsis:
        return args[0]
    return None


def _is_str_type(hint: Any) -> bool:
    return hint is Any or (isinstance(hint, type) and issubclass(hint, str))


def _check_field(spec: FieldSpec, record_name: str, field_names: set[str], frozen: bool) -> None:
    def fail(message: str) -> None:
        raise RuleDeclarationError(message, record=record_name, field_name=spec.name)

    if frozen and (spec.modifiers or spec.nested):
        fail("modifiers need a mutable record, but the dataclass is frozen")

    target = spec.item_type if spec.sequence else spec.value_type
    for rule in spec.modifiers:
        if isinstance(rule, STRING_MODIFIERS) and not _is_str_type(target):
            fail(f"{rule.name} only applies to str fields (or sequences of str)")

    for rule in spec.validators:
        if isinstance(rule, Required) and not spec.optional:
            fail("required only applies to optional fields")
        if isinstance(rule, MustMatch) and rule.other not in field_names:
            fail(f"must_match refers to unknown field {rule.other!r}")

    if spec.nested:
        if not dataclasses.is_dataclass(spec.nested_type):
            fail("validify only applies to validatable records (or sequences of them)")
        extra = [rule.name for rule in spec.validators if not isinstance(rule, Required)]
        if extra:
            fail(f"nested fields are validated by their own record; drop {', '.join(extra)}")


def validatable(cls: type | None = None, *, schema: SchemaValidator | Iterable[SchemaValidator] | None = None):
    """Mark a dataclass as a validatable record, optionally with schema validators.

    Schema validators receive the modified record and return None, a
    ValidationErrors, a single error or an iterable of errors.
    """
    if schema is None:
        hooks: tuple[SchemaValidator, ...] = ()
    elif callable(schema):
        hooks = (schema,)
    else:
        hooks = tuple(schema)

    def wrap(record_type: type) -> type:
        if not dataclasses.is_dataclass(record_type):
            raise RuleDeclarationError(f"@validatable must be applied to a dataclass, got {record_type!r}")
        setattr(record_type, HOOKS_ATTRIBUTE, hooks)
        return record_type

    if cls is not None:
        return wrap(cls)
    return wrap


def is_validatable(record_or_type: Any) -> bool:
    return dataclasses.is_dataclass(record_or_type)


def schema_of(record_or_type: Any) -> RecordSchema:
    """Cached schema for a record instance or type, built on first use.

    Building is deferred until first use so records may refer to types that
    are defined later in the module (including themselves).
    """
    record_type = record_or_type if isinstance(record_or_type, type) else type(record_or_type)
    schema = record_type.__dict__.get(SCHEMA_ATTRIBUTE)
    if schema is None:
        schema = RecordSchema.build(record_type)
        setattr(record_type, SCHEMA_ATTRIBUTE, schema)
    return schema
