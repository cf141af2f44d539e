"""Record walker: runs every field's rules and collects the errors.

Modification and validation are separate passes. Validation never stops at
the first failure; every validator of every field runs and every error is
reported, bound to its location in the record.
"""

import logging
from typing import Any

from .errors import FieldError, ValidationErrors
from .rules.catalog import Required
from .rules.engine import evaluate
from .schema import FieldSpec, RecordSchema, schema_of

logger = logging.getLogger(__name__)


class RecordWalker:
    """Walks a record's fields in declaration order.

    The walker needs exclusive access to the record while it runs: the
    modification pass writes modified values back onto it.
    """

    def modify(self, record: Any) -> None:
        """Apply each field's modifiers in declaration order, recursing into nested records."""
        schema = schema_of(record)
        for spec in schema.fields:
            value = getattr(record, spec.name)
            if value is None:
                continue

            for rule in spec.modifiers:
                outcome = evaluate(rule, spec.name, value, record)
                if outcome.replaced:
                    value = outcome.value

            if spec.nested:
                for item in self._nested_items(spec, value):
                    self.modify(item)

            if spec.modifiers:
                setattr(record, spec.name, value)

    def validate(self, record: Any) -> ValidationErrors:
        """Run every validator on every field, then the schema validators."""
        schema = schema_of(record)
        errors = ValidationErrors()

        for spec in schema.fields:
            errors.extend(self._validate_field(spec, record))

        errors.extend(self._run_schema_validators(schema, record))

        if errors:
            logger.debug(f"{schema.name}: {len(errors)} validation error(s)")
        return errors

    def validify(self, record: Any) -> ValidationErrors:
        """Modify the record in place, then validate the modified values."""
        self.modify(record)
        return self.validate(record)

    def _validate_field(self, spec: FieldSpec, record: Any) -> list[FieldError]:
        value = getattr(record, spec.name)
        errors: list[FieldError] = []

        if value is None:
            # Absent values are skipped by everything except required
            for rule in spec.validators:
                if isinstance(rule, Required):
                    errors.extend(self._bind(spec, evaluate(rule, spec.name, value, record).errors))
            return errors

        if spec.nested:
            if spec.sequence:
                for position, item in enumerate(self._nested_items(spec, value)):
                    nested = self.validate(item)
                    errors.extend(self._relocate(nested, spec.location_name, position))
            else:
                errors.extend(self._relocate(self.validate(value), spec.location_name))
            return errors

        for rule in spec.validators:
            outcome = evaluate(rule, spec.name, value, record)
            errors.extend(self._bind(spec, outcome.errors))
        return errors

    def _run_schema_validators(self, schema: RecordSchema, record: Any) -> ValidationErrors:
        # Schema validators run whether or not field validation passed
        errors = ValidationErrors()
        for hook in schema.schema_validators:
            errors.extend(ValidationErrors.collect(hook(record)))
        return errors

    @staticmethod
    def _nested_items(spec: FieldSpec, value: Any) -> list[Any]:
        if spec.sequence:
            return list(value)
        return [value]

    @staticmethod
    def _bind(spec: FieldSpec, errors: tuple[FieldError, ...]) -> list[FieldError]:
        return [error.for_field(spec.name, spec.location_name) for error in errors]

    @staticmethod
    def _relocate(nested: ValidationErrors, *segments: str | int) -> list:
        """Re-root a nested record's field errors under this field.

        Schema errors carry no location and are merged unchanged.
        """
        return [
            error.within(*segments) if isinstance(error, FieldError) else error
            for error in nested
        ]
