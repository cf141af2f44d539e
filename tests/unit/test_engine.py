"""Tests for single-rule evaluation."""

from dataclasses import dataclass
from decimal import Decimal

import pytest

from validify import (
    Capitalize,
    Contains,
    ContainsNot,
    CreditCard,
    CustomModifier,
    CustomValidator,
    Email,
    FieldError,
    Ip,
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
    Trim,
    Uppercase,
    Url,
)
from validify.rules import evaluate


def errors_of(rule, value, record=None):
    return evaluate(rule, "field", value, record).errors


class TestStringModifiers:
    """trim, uppercase, lowercase and capitalize."""

    @pytest.mark.parametrize("rule, value, expected", [
        (Trim(), "  padded \t", "padded"),
        (Uppercase(), "Shout", "SHOUT"),
        (Lowercase(), "WhIsPeR", "whisper"),
        (Capitalize(), "hello World", "Hello World"),
        (Capitalize(), "hELLO", "HELLO"),
        (Capitalize(), "", ""),
        (Capitalize(), "a", "A"),
    ])
    def test_modifier(self, rule, value, expected):
        outcome = evaluate(rule, "field", value)
        assert outcome.replaced
        assert outcome.ok
        assert outcome.value == expected

    @pytest.mark.parametrize("rule", [Trim(), Uppercase(), Lowercase()])
    def test_idempotent(self, rule):
        once = evaluate(rule, "field", "  MiXeD case  ").value
        twice = evaluate(rule, "field", once).value
        assert once == twice

    def test_element_wise_on_lists(self):
        assert evaluate(Trim(), "tags", [" a ", "b "]).value == ["a", "b"]
        assert evaluate(Uppercase(), "tags", ("x", "y")).value == ("X", "Y")

    def test_non_string_is_a_type_error(self):
        with pytest.raises(TypeError, match="requires a string"):
            evaluate(Trim(), "field", 42)


class TestCustomModifier:
    """Custom modifier functions."""

    def test_replacement_value(self):
        rule = CustomModifier(lambda value: value.replace("-", ""))
        assert evaluate(rule, "field", "a-b-c").value == "abc"

    def test_none_keeps_in_place_mutation(self):
        def add_default(value):
            value.setdefault("source", "api")

        data = {"id": 1}
        outcome = evaluate(CustomModifier(add_default), "field", data)
        assert outcome.value is data
        assert data == {"id": 1, "source": "api"}

    def test_applies_to_each_element(self):
        rule = CustomModifier(lambda value: value * 2)
        assert evaluate(rule, "field", [1, 2, 3]).value == [2, 4, 6]


class TestLengthAndRange:
    """length and range validators."""

    @pytest.mark.parametrize("rule, value, ok", [
        (Length(equal=8), "lower me", True),
        (Length(equal=8), "toolong string", False),
        (Length(min=2), "a", False),
        (Length(max=2), [1, 2, 3], False),
        (Length(min=1, max=2), {"a": 1}, True),
        (Length(min=1, max=2, equal=2), "ab", True),
    ])
    def test_length(self, rule, value, ok):
        assert (not errors_of(rule, value)) is ok

    def test_length_error_params(self):
        [error] = errors_of(Length(max=3), "abcd")
        assert error.kind == "length"
        assert error.code is None and error.message is None
        assert error.params == {"value": "abcd", "max": 3}

    def test_length_does_not_run_per_element(self):
        assert not errors_of(Length(max=2), ["long string", "another"])

    @pytest.mark.parametrize("value, ok", [(1, True), (10, True), (0, False), (11, False), (5.5, True)])
    def test_range_inclusive(self, value, ok):
        assert (not errors_of(Range(min=1, max=10), value)) is ok

    def test_range_decimal(self):
        rule = Range(min=0, max=100)
        assert not errors_of(rule, Decimal("10.50"))
        [error] = errors_of(rule, Decimal("150.00"))
        assert error.kind == "range"
        assert error.params["value"] == Decimal("150.00")

    def test_range_rejects_non_numbers(self):
        with pytest.raises(TypeError):
            errors_of(Range(min=1), "5")
        with pytest.raises(TypeError):
            errors_of(Range(min=0), True)


class TestFormatValidators:
    """Parameterless string format validators."""

    @pytest.mark.parametrize("rule, good, bad", [
        (Email(), "ada@lovelace.org", "not-an-email"),
        (Url(), "https://example.com/path?q=1", "example com"),
        (NonControlChar(), "plain text", "bell\x07"),
        (CreditCard(), "4111 1111 1111 1111", "4111 1111 1111 1112"),
        (Phone(), "+14152370800", "bob"),
        (Ip(), "10.0.0.1", "10.0.0.256"),
    ])
    def test_good_and_bad(self, rule, good, bad):
        assert not errors_of(rule, good)
        [error] = errors_of(rule, bad)
        assert error.kind == rule.name
        assert error.params["value"] == bad

    def test_ip_families(self):
        assert not errors_of(Ip(format="v6"), "::1")
        assert errors_of(Ip(format="v6"), "127.0.0.1")
        assert errors_of(Ip(format="v4"), "::1")

    def test_regex(self):
        rule = Regex(r"^[A-Z]{3}-\d{2}$")
        assert not errors_of(rule, "ABC-12")
        [error] = errors_of(rule, "abc-12")
        assert error.kind == "regex"

    def test_sequence_checked_per_element_with_index(self):
        errors = errors_of(Email(), ["ok@example.org", "nope", "also@example.org", "bad"])
        assert [error.location.segments for error in errors] == [(1,), (3,)]

    def test_code_and_message_override(self):
        [error] = errors_of(Phone(code="oops", message="call me maybe"), "bob")
        assert error.kind == "phone"
        assert error.code == "oops"
        assert error.message == "call me maybe"
        assert error.params["value"] == "bob"


class TestMembershipValidators:
    """contains, contains_not, is_in and not_in."""

    def test_is_in(self):
        rule = IsIn(["online", "offline"])
        assert not errors_of(rule, "online")
        [error] = errors_of(rule, "invalid")
        assert error.kind == "is_in"

    def test_not_in(self):
        rule = NotIn({"root", "admin"})
        assert not errors_of(rule, "ada")
        assert errors_of(rule, "admin")[0].kind == "not_in"

    def test_contains_on_sequences_strings_and_mappings(self):
        assert not errors_of(Contains("b"), ["a", "b"])
        assert not errors_of(Contains("ell"), "hello")
        assert not errors_of(Contains("key"), {"key": 1})
        assert errors_of(Contains(1), {"key": 1})

    def test_contains_not(self):
        assert not errors_of(ContainsNot("x"), ["a", "b"])
        assert errors_of(ContainsNot("a"), ["a", "b"])[0].kind == "contains_not"


class TestRecordAwareValidators:
    """must_match and required."""

    @dataclass
    class Passwords:
        password: str
        confirm: str

    def test_must_match(self):
        rule = MustMatch("confirm")
        equal = self.Passwords("secret", "secret")
        assert not errors_of(rule, equal.password, equal)

        different = self.Passwords("secret", "secret!")
        [error] = errors_of(rule, different.password, different)
        assert error.kind == "must_match"
        assert error.params["other"] == "confirm"

    def test_must_match_needs_record(self):
        with pytest.raises(TypeError):
            errors_of(MustMatch("confirm"), "secret")

    def test_required(self):
        assert errors_of(Required(), None)[0].kind == "required"
        assert not errors_of(Required(), "present")


class TestCustomValidator:
    """Custom validator functions."""

    def test_success(self):
        assert not errors_of(CustomValidator(lambda value: None), "anything")

    def test_single_error(self):
        rule = CustomValidator(lambda value: FieldError("not_even", message="must be even"))
        [error] = errors_of(rule, 3)
        assert error.kind == "not_even"
        assert error.message == "must be even"

    def test_multiple_errors_and_overrides(self):
        rule = CustomValidator(
            lambda value: [FieldError("a"), FieldError("b")],
            code="custom_code",
        )
        errors = errors_of(rule, "x")
        assert [error.kind for error in errors] == ["a", "b"]
        assert all(error.code == "custom_code" for error in errors)
