from __future__ import annotations

import json
from typing import Any, Callable

import httpx
import pytest

from policy_toolkit.credentials import MemoryCredentialStore
from policy_toolkit.gemini_client import GeminiClient
from policy_toolkit.settings import settings

TEST_URL = "https://gemini.test/v1beta/models/test-model:generateContent"


def gemini_body(*texts: str) -> dict[str, Any]:
	return {"candidates": [{"content": {"role": "model", "parts": [{"text": t} for t in texts]}}]}


class FakeGemini:
	"""Stands in for the generateContent endpoint and records every request."""

	def __init__(self) -> None:
		self.requests: list[httpx.Request] = []
		self._reply: Callable[[httpx.Request], httpx.Response] = lambda req: httpx.Response(200, json=gemini_body(""))

	def reply_text(self, *texts: str) -> None:
		self._reply = lambda req: httpx.Response(200, json=gemini_body(*texts))

	def reply_queue(self, *texts: str) -> None:
		pending = list(texts)
		self._reply = lambda req: httpx.Response(200, json=gemini_body(pending.pop(0)))

	def reply_with(self, fn: Callable[[httpx.Request], httpx.Response]) -> None:
		self._reply = fn

	def _handle(self, request: httpx.Request) -> httpx.Response:
		self.requests.append(request)
		return self._reply(request)

	@property
	def transport(self) -> httpx.MockTransport:
		return httpx.MockTransport(self._handle)

	def payload(self, index: int = -1) -> dict[str, Any]:
		return json.loads(self.requests[index].content)

	def prompt(self, index: int = -1) -> str:
		return self.payload(index)["contents"][0]["parts"][0]["text"]


@pytest.fixture(autouse=True)
def _ai_studio_settings(monkeypatch: pytest.MonkeyPatch) -> None:
	monkeypatch.setattr(settings, "gemini_provider", "ai_studio")
	monkeypatch.setattr(settings, "gemini_base_url", None)
	monkeypatch.setattr(settings, "gemini_timeout_seconds", None)


@pytest.fixture
def fake() -> FakeGemini:
	return FakeGemini()


@pytest.fixture
def store() -> MemoryCredentialStore:
	return MemoryCredentialStore("test-key")


@pytest.fixture
def client(store: MemoryCredentialStore, fake: FakeGemini) -> GeminiClient:
	return GeminiClient(store, base_url=TEST_URL, transport=fake.transport)
