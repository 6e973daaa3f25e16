from __future__ import annotations
import json
import logging
import httpx
from typing import Any, Dict, Mapping, Optional, Union
from .credentials import CredentialStore
from .errors import MalformedResponseError, MissingCredentialError, TransportError
from .schema import parse_schema, SchemaNode
from .settings import settings

LOGGER = logging.getLogger("policy_toolkit.gemini")


def _reject_constant(name: str) -> Any:
	# NaN/Infinity are accepted by the json module but are not JSON
	raise ValueError(f"invalid JSON constant {name}")


class GeminiClient:
	"""Turns a prompt, and optionally a schema, into one Gemini generateContent call.

	The client holds no connection and no key: the key is read from ``credentials``
	on every call, and each call opens and closes its own HTTP client.
	"""

	def __init__(
		self,
		credentials: CredentialStore,
		*,
		base_url: Optional[str] = None,
		model: Optional[str] = None,
		transport: Optional[httpx.AsyncBaseTransport] = None,
	) -> None:
		self._credentials = credentials
		self.model = model or settings.gemini_model
		self.provider = settings.gemini_provider
		if self.provider == "vertex":
			region = settings.vertex_region
			project = settings.vertex_project or "placeholder-project"
			# Vertex AI Generative REST endpoint (API key via header)
			self.base_url = base_url or settings.gemini_base_url or (
				f"https://{region}-aiplatform.googleapis.com/v1/projects/{project}/locations/{region}/publishers/google/models/{self.model}:generateContent"
			)
			self._auth_in_query = False
		else:
			# Google AI Studio (Generative Language API)
			self.base_url = base_url or settings.gemini_base_url or (
				f"https://generativelanguage.googleapis.com/v1beta/models/{self.model}:generateContent"
			)
			self._auth_in_query = True
		self._transport = transport

	def has_credential(self) -> bool:
		return bool(self._credentials.get())

	async def generate_text(self, prompt: str) -> str:
		payload: Dict[str, Any] = {"contents": [{"parts": [{"text": prompt}]}]}
		return await self._post_payload(payload)

	async def generate_structured(
		self,
		prompt: str,
		schema: Union[SchemaNode, Mapping[str, Any]],
		*,
		validate: bool = False,
	) -> Any:
		"""Ask for JSON constrained to ``schema`` and return the parsed value.

		The endpoint enforces the schema; with ``validate=True`` the parsed value is
		checked against it again and any mismatch raises MalformedResponseError.
		"""
		descriptor = parse_schema(schema)
		payload: Dict[str, Any] = {
			"contents": [{"parts": [{"text": prompt}]}],
			"generationConfig": {
				"responseMimeType": "application/json",
				"responseSchema": descriptor.to_gemini(),
			},
		}
		text = await self._post_payload(payload)
		try:
			data = json.loads(text.strip(), parse_constant=_reject_constant)
		except ValueError as e:
			LOGGER.warning("Gemini returned non-JSON for a structured call (%d chars)", len(text))
			raise MalformedResponseError(f"Failed to get a valid structured response from the API: {e}") from e
		if validate:
			problems = descriptor.problems(data)
			if problems:
				LOGGER.warning("Structured response does not match schema: %s", problems[0])
				raise MalformedResponseError(f"Structured response does not match schema: {'; '.join(problems)}")
		return data

	async def _post_payload(self, payload: Dict[str, Any]) -> str:
		api_key = self._credentials.get()
		if not api_key:
			raise MissingCredentialError()
		params: Dict[str, Any] = {}
		headers: Dict[str, str] = {}
		if self._auth_in_query:
			params["key"] = api_key
		else:
			headers["x-goog-api-key"] = api_key
		client_kwargs: Dict[str, Any] = {"transport": self._transport}
		if settings.gemini_timeout_seconds is not None:
			client_kwargs["timeout"] = settings.gemini_timeout_seconds
		LOGGER.debug("POST %s model=%s structured=%s", self.provider, self.model, "generationConfig" in payload)
		try:
			async with httpx.AsyncClient(**client_kwargs) as client:
				r = await client.post(self.base_url, params=params, headers=headers, json=payload)
				r.raise_for_status()
		except httpx.HTTPStatusError as http_err:
			LOGGER.warning("Gemini returned HTTP %s", http_err.response.status_code)
			raise TransportError(
				f"Gemini request failed with HTTP {http_err.response.status_code}: {http_err.response.text}"
			) from http_err
		except httpx.RequestError as net_err:
			LOGGER.warning("Gemini request failed: %s", net_err)
			raise TransportError(str(net_err) or net_err.__class__.__name__) from net_err
		try:
			data = r.json()
			parts = data["candidates"][0]["content"]["parts"]
			texts = [part["text"] for part in parts if "text" in part]
		except (ValueError, KeyError, IndexError, TypeError) as e:
			raise TransportError(f"Unexpected Gemini response: {r.text}") from e
		if not texts:
			raise TransportError(f"Unexpected Gemini response: {r.text}")
		return "".join(texts)
