from __future__ import annotations

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from policy_toolkit.credentials import DatabaseCredentialStore, MemoryCredentialStore
from policy_toolkit.db import Base
from policy_toolkit.models import StoredSetting


@pytest.fixture
def session_factory():
	engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool, future=True)
	Base.metadata.create_all(bind=engine)
	try:
		yield sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)
	finally:
		engine.dispose()


def test_memory_store_treats_empty_as_absent() -> None:
	store = MemoryCredentialStore("")
	assert store.get() is None
	store.set("k1")
	assert store.get() == "k1"
	store.set("")
	assert store.get() is None


def test_database_store_starts_empty(session_factory) -> None:
	assert DatabaseCredentialStore(session_factory).get() is None


def test_database_store_round_trip_and_overwrite(session_factory) -> None:
	store = DatabaseCredentialStore(session_factory)
	store.set("first")
	assert store.get() == "first"
	store.set("second")
	assert store.get() == "second"
	# A separate store over the same database sees the persisted value
	assert DatabaseCredentialStore(session_factory).get() == "second"


def test_database_store_clear_removes_row(session_factory) -> None:
	store = DatabaseCredentialStore(session_factory)
	store.set("secret")
	store.set("")
	assert store.get() is None
	db = session_factory()
	try:
		assert db.query(StoredSetting).count() == 0
	finally:
		db.close()


def test_database_store_clear_when_empty_is_noop(session_factory) -> None:
	store = DatabaseCredentialStore(session_factory)
	store.set("")
	assert store.get() is None


def test_database_store_keys_are_independent(session_factory) -> None:
	gemini = DatabaseCredentialStore(session_factory)
	other = DatabaseCredentialStore(session_factory, key="other_key")
	gemini.set("g")
	assert other.get() is None
	other.set("o")
	assert gemini.get() == "g"
