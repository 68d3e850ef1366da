import importlib.util
from pathlib import Path

import pytest

from pakproperty.models import User

VERSIONS = Path(__file__).resolve().parent.parent / "alembic" / "versions"

class RecordingOp:
    """Stands in for ``alembic.op`` and keeps every call."""

    def __init__(self):
        self.calls = []

    def __getattr__(self, name):
        def record(*args, **kwargs):
            self.calls.append((name, args, kwargs))
        return record

    def named(self, name):
        return [(args, kwargs) for call, args, kwargs in self.calls if call == name]

def load_migration(filename):
    spec = importlib.util.spec_from_file_location(filename[:-3], VERSIONS / filename)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module

@pytest.fixture
def recorder():
    return RecordingOp()

def test_users_email_has_one_unique_index(monkeypatch, recorder):
    migration = load_migration("001_create_listing_tables.py")
    monkeypatch.setattr(migration, "op", recorder)
    migration.upgrade()

    users = next(args for args, _ in recorder.named("create_table") if args[0] == "users")
    email = next(c for c in users[1:] if getattr(c, "name", None) == "email")
    assert not email.unique
    indexes = {args[0]: kwargs for args, kwargs in recorder.named("create_index")}
    assert indexes["ix_users_email"] == {"unique": True}

def test_model_email_index_matches_migration():
    index = next(i for i in User.__table__.indexes if i.name == "ix_users_email")
    assert index.unique
    assert [c.name for c in index.columns] == ["email"]

def test_inquiries_migration_follows_listing_tables(monkeypatch, recorder):
    migration = load_migration("002_add_profiles_and_inquiries.py")
    assert migration.down_revision == "001_create_listing_tables"
    monkeypatch.setattr(migration, "op", recorder)
    migration.upgrade()

    added = {(args[0], args[1].name) for args, _ in recorder.named("add_column")}
    assert ("properties", "inquiry_count") in added
    assert ("users", "preferences") in added
    assert "inquiries" in [args[0] for args, _ in recorder.named("create_table")]

    migration.downgrade()
    dropped = {(args[0], args[1]) for args, _ in recorder.named("drop_column")}
    assert dropped == added
