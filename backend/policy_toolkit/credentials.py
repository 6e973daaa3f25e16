"""Credential stores for the Gemini API key.

A store only has to answer ``get()`` and accept ``set()``. The client reads it on
every call, so whatever a store returns at that moment is what gets used.
"""
from __future__ import annotations
import logging
from typing import Callable, Optional, Protocol

from sqlalchemy.orm import Session

from .models import StoredSetting

LOGGER = logging.getLogger("policy_toolkit.credentials")

CREDENTIAL_KEY = "gemini_api_key"


class CredentialStore(Protocol):
	def get(self) -> Optional[str]: ...

	def set(self, value: str) -> None: ...


class MemoryCredentialStore:
	"""Process-local store, mostly for scripts and tests."""

	def __init__(self, value: Optional[str] = None) -> None:
		self._value = value or None

	def get(self) -> Optional[str]:
		return self._value

	def set(self, value: str) -> None:
		self._value = value or None


class DatabaseCredentialStore:
	"""Persists the key as a row in ``stored_settings``.

	Each read and write uses its own session so a value saved by one request is
	visible to the next one.
	"""

	def __init__(self, session_factory: Callable[[], Session], *, key: str = CREDENTIAL_KEY) -> None:
		self._session_factory = session_factory
		self._key = key

	def get(self) -> Optional[str]:
		db = self._session_factory()
		try:
			row = db.get(StoredSetting, self._key)
			return row.value if row and row.value else None
		finally:
			db.close()

	def set(self, value: str) -> None:
		# Empty value clears the key
		db = self._session_factory()
		try:
			row = db.get(StoredSetting, self._key)
			if not value:
				if row is not None:
					db.delete(row)
					LOGGER.info("Cleared stored setting %s", self._key)
			elif row is None:
				db.add(StoredSetting(key=self._key, value=value))
			else:
				row.value = value
				db.add(row)
			db.commit()
		except Exception:
			db.rollback()
			raise
		finally:
			db.close()
