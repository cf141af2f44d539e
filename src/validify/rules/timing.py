"""Date/time comparisons for the ``time`` rule."""

from datetime import date, datetime

from .catalog import Time, TimeOp


def now_for(value: date) -> date:
    """Current time in the same flavour as ``value``.

    Aware datetimes get an aware now in their own timezone, naive datetimes a
    naive local now, and plain dates today's date.
    """
    if isinstance(value, datetime):
        return datetime.now(value.tzinfo) if value.tzinfo else datetime.now()
    return date.today()


def align(reference: date, value: date) -> date:
    """Coerce ``reference`` so it compares against ``value`` without TypeError."""
    if isinstance(value, datetime):
        if not isinstance(reference, datetime):
            return datetime(reference.year, reference.month, reference.day, tzinfo=value.tzinfo)
        if value.tzinfo is not None and reference.tzinfo is None:
            return reference.replace(tzinfo=value.tzinfo)
        if value.tzinfo is None and reference.tzinfo is not None:
            return reference.replace(tzinfo=None)
        return reference
    if isinstance(reference, datetime):
        return reference.date()
    return reference


def resolve_target(rule: Time, value: date) -> date | None:
    target = rule.target
    if target is None:
        return None
    if callable(target):
        target = target()
    return align(target, value)


def is_before(value: date, bound: date, inclusive: bool) -> bool:
    return value <= bound if inclusive else value < bound


def is_after(value: date, bound: date, inclusive: bool) -> bool:
    return value >= bound if inclusive else value > bound


def check_time(rule: Time, value: date) -> bool:
    """True when ``value`` satisfies the rule."""
    if not isinstance(value, date):
        raise TypeError(f"time rule requires a date or datetime value, got {type(value).__name__}")

    op = rule.op
    inclusive = bool(rule.inclusive)

    if op is TimeOp.BEFORE:
        return is_before(value, resolve_target(rule, value), inclusive)
    if op is TimeOp.AFTER:
        return is_after(value, resolve_target(rule, value), inclusive)

    now = now_for(value)
    if op is TimeOp.BEFORE_NOW:
        return is_before(value, now, inclusive)
    if op is TimeOp.AFTER_NOW:
        return is_after(value, now, inclusive)
    if op is TimeOp.BEFORE_FROM_NOW:
        return is_before(value, now + rule.interval, inclusive)
    if op is TimeOp.AFTER_FROM_NOW:
        return is_after(value, now - rule.interval, inclusive)

    # in_period: window around the target (or now), closed at both ends
    anchor = resolve_target(rule, value) or now
    first, second = anchor - rule.interval, anchor + rule.interval
    return min(first, second) <= value <= max(first, second)
