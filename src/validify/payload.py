"""Two-phase payload lifecycle.

Incoming data is first deserialized into a payload model in which every
field is optional, so incomplete input still deserializes. The payload is then
checked for missing required fields, converted into the real record, modified
and validated.
"""

import logging
from collections.abc import Mapping
from typing import Any, List, Optional, TypeVar, get_origin

from pydantic import BaseModel, ConfigDict, Field, create_model

from .errors import FieldError, ValidationErrors, ValidifyError
from .location import Location
from .rules.catalog import RuleKind
from .schema import FieldSpec, schema_of
from .walker import RecordWalker

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT")

_PAYLOAD_CONFIG = ConfigDict(populate_by_name=True, extra="ignore", arbitrary_types_allowed=True)

# Payload models are derived once per record type and reused
_payload_models: dict[type, type[BaseModel]] = {}
_building: set[type] = set()


def _model_name(record_type: type) -> str:
    return f"{record_type.__name__}Payload"


def _payload_annotation(spec: FieldSpec) -> Any:
    if not spec.nested:
        return Optional[spec.value_type]
    nested_type = spec.nested_type
    if nested_type in _building:
        # Self-referencing records resolve once the model is registered
        item = _model_name(nested_type)
    else:
        item = payload_model(nested_type)
    if spec.sequence:
        return Optional[List[item]]
    return Optional[item]


def payload_model(record_type: type) -> type[BaseModel]:
    """Payload model for ``record_type``: same fields, all optional.

    Nested validatable fields map to the nested record's payload model.
    Aliases declared on the record become the payload's input keys.
    """
    model = _payload_models.get(record_type)
    if model is not None:
        return model

    schema = schema_of(record_type)
    _building.add(record_type)
    try:
        definitions = {
            spec.name: (_payload_annotation(spec), Field(default=None, alias=spec.alias))
            for spec in schema.fields
        }
        model = create_model(_model_name(record_type), __config__=_PAYLOAD_CONFIG, **definitions)
    finally:
        _building.discard(record_type)

    _payload_models[record_type] = model
    _complete_models()
    logger.debug(f"Derived payload model {model.__name__} with {len(definitions)} fields")
    return model


def _complete_models() -> None:
    namespace = {m.__name__: m for m in _payload_models.values()}
    while True:
        pending = [m for m in _payload_models.values() if not m.__pydantic_complete__]
        rebuilt = [m.model_rebuild(_types_namespace=namespace, raise_errors=False) for m in pending]
        if not any(rebuilt):
            return


def load_payload(record_type: type, data: Any) -> BaseModel:
    """Deserialize ``data`` into the payload model (no-op for payload instances).

    Raises:
        pydantic.ValidationError: If a present value has the wrong type
    """
    model = payload_model(record_type)
    if isinstance(data, model):
        return data
    if isinstance(data, Mapping):
        return model.model_validate(data)
    if isinstance(data, (str, bytes)):
        return model.model_validate_json(data)
    return model.model_validate(data, from_attributes=True)


def check_required(record_type: type, payload: BaseModel) -> ValidationErrors:
    """Report every non-optional field that the payload lacks.

    Nested payloads are checked too, so locations point at the missing value
    inside the nested record or sequence element.
    """
    errors = ValidationErrors()
    errors.extend(_missing(record_type, payload, Location()))
    return errors


def _missing(record_type: type, payload: BaseModel, location: Location) -> list[FieldError]:
    errors = []
    for spec in schema_of(record_type).fields:
        value = getattr(payload, spec.name)
        here = location.field(spec.location_name)
        if value is None:
            if not spec.optional:
                errors.append(FieldError(
                    kind=RuleKind.REQUIRED.value,
                    field=spec.name,
                    location=here,
                ))
            continue
        if spec.nested:
            if spec.sequence:
                for position, item in enumerate(value):
                    errors.extend(_missing(spec.nested_type, item, here.index(position)))
            else:
                errors.extend(_missing(spec.nested_type, value, here))
    return errors


def build_record(record_type: type[RecordT], payload: BaseModel) -> RecordT:
    """Convert a payload that passed the required check into the record."""
    values = {}
    for spec in schema_of(record_type).fields:
        value = getattr(payload, spec.name)
        if value is not None and spec.nested:
            if spec.sequence:
                value = _rebuild_sequence(spec.value_type, [build_record(spec.nested_type, item) for item in value])
            else:
                value = build_record(spec.nested_type, value)
        values[spec.name] = value
    return record_type(**values)


def _rebuild_sequence(hint: Any, items: list) -> Any:
    origin = get_origin(hint) or hint
    if origin in (tuple, set, frozenset):
        return origin(items)
    return items


def validify(record_type: type[RecordT], data: Any) -> RecordT:
    """Deserialize, check, convert, modify and validate in one call.

    Args:
        record_type: Validatable dataclass to produce
        data: Payload model instance, mapping, or JSON text

    Returns:
        The modified record

    Raises:
        ValidifyError: Missing required fields (no other checks run), or the
            field and schema errors of the modified record
    """
    payload = load_payload(record_type, data)

    missing = check_required(record_type, payload)
    if missing:
        logger.debug(f"{record_type.__name__}: {len(missing)} required field(s) missing")
        raise ValidifyError(missing, record_type.__name__)

    record = build_record(record_type, payload)
    errors = RecordWalker().validify(record)
    if errors:
        raise ValidifyError(errors, record_type.__name__)
    return record


def validate(record: Any) -> None:
    """Validate an already built record without modifying it.

    Raises:
        ValidifyError: With every field and schema error
    """
    errors = RecordWalker().validate(record)
    if errors:
        raise ValidifyError(errors, type(record).__name__)


def modify(record: RecordT) -> RecordT:
    """Apply modifiers in place and return the same record."""
    RecordWalker().modify(record)
    return record
