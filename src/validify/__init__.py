"""validify - declarative validation and modification of structured records.

Fields of a dataclass declare ordered modifiers (trim, case conversion, custom
transforms) and validators (length, range, formats, membership, time...).
``validify()`` takes a loosely-typed payload, rejects it early if required
fields are missing, then builds the record, applies the modifiers and reports
every validation error in one go.

Basic usage:
    from dataclasses import dataclass
    from validify import Email, Length, Trim, Lowercase, ValidifyError, field_rules, validify

    @dataclass
    class Signup:
        name: str = field_rules(Trim(), Length(min=1, max=40))
        email: str = field_rules(Trim(), Lowercase(), Email())

    try:
        signup = validify(Signup, {"name": " Ada ", "email": "ADA@EXAMPLE.ORG"})
    except ValidifyError as e:
        print(e.errors.to_list())
"""

__version__ = "0.1.0"
__author__ = "validify contributors"
__description__ = "Declarative validation and modification engine for structured records"

from validify.config import ValidifyConfig
from validify.errors import (
    FieldError,
    RuleDeclarationError,
    SchemaError,
    ValidationError,
    ValidationErrors,
    ValidifyError,
    schema_error,
)
from validify.location import Location
from validify.payload import (
    build_record,
    check_required,
    load_payload,
    modify,
    payload_model,
    validate,
    validify,
)
from validify.rules import (
    Capitalize,
    Contains,
    ContainsNot,
    CreditCard,
    CustomModifier,
    CustomValidator,
    Email,
    Ip,
    IpFormat,
    IsIn,
    Length,
    Lowercase,
    MustMatch,
    NonControlChar,
    NotIn,
    Phone,
    Range,
    Regex,
    Required,
    Rule,
    RuleKind,
    Time,
    TimeOp,
    Trim,
    Uppercase,
    Url,
    Validify,
)
from validify.schema import FieldSpec, RecordSchema, field_rules, schema_of, validatable
from validify.walker import RecordWalker

__all__ = [
    "__version__",
    "__author__",
    "__description__",
    "ValidifyConfig",
    # Lifecycle
    "validify",
    "validate",
    "modify",
    "payload_model",
    "load_payload",
    "check_required",
    "build_record",
    # Declarations
    "field_rules",
    "validatable",
    "schema_of",
    "FieldSpec",
    "RecordSchema",
    "RecordWalker",
    # Errors
    "Location",
    "ValidationError",
    "FieldError",
    "SchemaError",
    "ValidationErrors",
    "ValidifyError",
    "RuleDeclarationError",
    "schema_error",
    # Rules
    "Rule",
    "RuleKind",
    "IpFormat",
    "TimeOp",
    "Trim",
    "Uppercase",
    "Lowercase",
    "Capitalize",
    "CustomModifier",
    "Validify",
    "Length",
    "Range",
    "Email",
    "Url",
    "NonControlChar",
    "CreditCard",
    "Phone",
    "Ip",
    "MustMatch",
    "Contains",
    "ContainsNot",
    "IsIn",
    "NotIn",
    "Regex",
    "Required",
    "CustomValidator",
    "Time",
]
