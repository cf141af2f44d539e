"""Tests for rule declarations in the built-in catalog."""

import re
from datetime import datetime, timedelta

import pytest

from validify import (
    Ip,
    IpFormat,
    Length,
    Range,
    Regex,
    RuleDeclarationError,
    RuleKind,
    Time,
    TimeOp,
    Trim,
)


class TestRuleDescriptions:
    """Rules are plain, immutable descriptions."""

    def test_kind_and_name(self):
        assert Trim().kind is RuleKind.TRIM
        assert Trim().name == "trim"
        assert Trim.modifier is True
        assert Length.modifier is False

    def test_code_and_message_are_keyword_only(self):
        rule = Length(max=3, code="too_long", message="keep it short")
        assert rule.code == "too_long"
        assert rule.message == "keep it short"

    def test_params(self):
        assert Length(min=1, max=3).params() == {"min": 1, "max": 3}
        assert Range(max=10).params() == {"max": 10}


class TestDeclarationErrors:
    """Malformed declarations fail when declared, not when validating."""

    def test_length_needs_a_bound(self):
        with pytest.raises(RuleDeclarationError):
            Length()

    def test_length_min_above_max(self):
        with pytest.raises(RuleDeclarationError, match="greater than max"):
            Length(min=5, max=2)

    def test_range_needs_a_bound(self):
        with pytest.raises(RuleDeclarationError):
            Range()

    def test_regex_compiled_at_declaration(self):
        rule = Regex(r"^\d+$")
        assert isinstance(rule.pattern, re.Pattern)

    def test_malformed_regex(self):
        with pytest.raises(RuleDeclarationError, match="invalid regex"):
            Regex("([a-z")

    def test_ip_format_coerced(self):
        assert Ip(format="v4").format is IpFormat.V4
        with pytest.raises(RuleDeclarationError):
            Ip(format="v5")


class TestTimeDeclaration:
    """Time rule parameter handling."""

    def test_literal_target_parsed_with_format(self):
        rule = Time(TimeOp.BEFORE, target="2500-01-01", format="%Y-%m-%d")
        assert rule.target == datetime(2500, 1, 1)

    def test_literal_target_requires_format(self):
        with pytest.raises(RuleDeclarationError, match="requires a format"):
            Time(TimeOp.BEFORE, target="2500-01-01")

    def test_malformed_literal_target(self):
        with pytest.raises(RuleDeclarationError, match="does not match format"):
            Time(TimeOp.AFTER, target="01/01/2500", format="%Y-%m-%d")

    def test_before_requires_target(self):
        with pytest.raises(RuleDeclarationError, match="requires a target"):
            Time(TimeOp.BEFORE)

    def test_from_now_requires_interval(self):
        with pytest.raises(RuleDeclarationError, match="requires an interval"):
            Time(TimeOp.AFTER_FROM_NOW)

    @pytest.mark.parametrize("op", [TimeOp.BEFORE_FROM_NOW, TimeOp.AFTER_FROM_NOW])
    def test_from_now_rejects_negative_interval(self, op):
        with pytest.raises(RuleDeclarationError, match="negative interval"):
            Time(op, interval=timedelta(days=-1))

    def test_in_period_tolerates_negative_interval(self):
        rule = Time(TimeOp.IN_PERIOD, interval=timedelta(hours=-2))
        assert rule.interval == timedelta(hours=-2)

    def test_inclusive_defaults(self):
        assert Time(TimeOp.BEFORE_FROM_NOW, interval=timedelta(days=1)).inclusive is True
        assert Time(TimeOp.AFTER_FROM_NOW, interval=timedelta(days=1)).inclusive is True
        assert Time(TimeOp.BEFORE_NOW).inclusive is False
        assert Time(TimeOp.AFTER, target=datetime(2000, 1, 1)).inclusive is False

    def test_operator_given_as_string(self):
        assert Time("after_now").op is TimeOp.AFTER_NOW
        with pytest.raises(RuleDeclarationError, match="unknown time operator"):
            Time("sometime")
