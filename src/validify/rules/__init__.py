"""Rule catalog and single-rule evaluation."""

from .catalog import (
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
from .engine import EVALUATORS, Outcome, evaluate

__all__ = [
    "Rule",
    "RuleKind",
    "IpFormat",
    "TimeOp",
    "Outcome",
    "EVALUATORS",
    "evaluate",
    # Modifiers
    "Trim",
    "Uppercase",
    "Lowercase",
    "Capitalize",
    "CustomModifier",
    "Validify",
    # Validators
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
