"""Shared fixtures for validify tests."""

import pytest

from validify import RecordWalker


@pytest.fixture
def walker():
    """Fresh record walker."""
    return RecordWalker()


@pytest.fixture
def records_module(tmp_path, monkeypatch):
    """Importable module holding record types for CLI tests."""
    source = '''
from dataclasses import dataclass, field

from validify import (
    Email, IsIn, Length, Lowercase, Trim, Validify, field_rules, schema_error, validatable,
)


def no_admins(record):
    if record.name == "admin":
        return schema_error("reserved_name", "admin is reserved")


@dataclass
class Tag:
    label: str = field_rules(Trim(), Length(min=2))


@validatable(schema=no_admins)
@dataclass
class Signup:
    name: str = field_rules(Trim(), Lowercase(), Length(max=10))
    email: str = field_rules(Trim(), Email())
    status: str | None = field_rules(IsIn(["online", "offline"]), default=None)
    tags: list[Tag] = field_rules(Validify(), default_factory=list)
'''
    module_dir = tmp_path / "records_pkg"
    module_dir.mkdir()
    (module_dir / "signup_records.py").write_text(source, encoding="utf-8")
    monkeypatch.syspath_prepend(str(module_dir))
    return "signup_records"
