from fastapi import Depends

from .credentials import CredentialStore, DatabaseCredentialStore
from .db import SessionLocal
from .gemini_client import GeminiClient


def get_credential_store() -> CredentialStore:
	return DatabaseCredentialStore(SessionLocal)


def get_gemini_client(store: CredentialStore = Depends(get_credential_store)) -> GeminiClient:
	return GeminiClient(store)
