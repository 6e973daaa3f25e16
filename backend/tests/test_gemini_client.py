from __future__ import annotations

import asyncio

import httpx
import pytest

from conftest import TEST_URL, gemini_body
from policy_toolkit.credentials import MemoryCredentialStore
from policy_toolkit.errors import MalformedResponseError, MissingCredentialError, SchemaError, TransportError
from policy_toolkit.gemini_client import GeminiClient
from policy_toolkit.schema import ArraySchema, IntegerSchema, ObjectSchema, StringSchema
from policy_toolkit.settings import settings

GRADE_SCHEMA = {
	"type": "object",
	"properties": {
		"overallGrade": {"type": "enum", "values": ["A", "B", "C", "D", "F"]},
		"gradeReasoning": {"type": "string"},
		"sections": {
			"type": "array",
			"items": {
				"type": "object",
				"properties": {"title": {"type": "string"}, "score": {"type": "integer"}},
				"required": ["title", "score"],
			},
		},
	},
	"required": ["overallGrade", "gradeReasoning", "sections"],
}


def test_has_credential_reflects_store() -> None:
	store = MemoryCredentialStore()
	client = GeminiClient(store, base_url=TEST_URL)
	assert client.has_credential() is False
	store.set("abc")
	assert client.has_credential() is True
	store.set("")
	assert client.has_credential() is False


def test_generate_text_without_credential_makes_no_call(fake) -> None:
	client = GeminiClient(MemoryCredentialStore(), base_url=TEST_URL, transport=fake.transport)
	with pytest.raises(MissingCredentialError):
		asyncio.run(client.generate_text("Explain X"))
	assert fake.requests == []


def test_generate_structured_without_credential_makes_no_call(fake) -> None:
	client = GeminiClient(MemoryCredentialStore(), base_url=TEST_URL, transport=fake.transport)
	with pytest.raises(MissingCredentialError):
		asyncio.run(client.generate_structured("Grade this", GRADE_SCHEMA))
	assert fake.requests == []


def test_generate_structured_returns_parsed_json(client, fake) -> None:
	fake.reply_text('{"overallGrade":"B","gradeReasoning":"ok","sections":[]}')
	result = asyncio.run(client.generate_structured("Grade this policy", GRADE_SCHEMA))
	assert result == {"overallGrade": "B", "gradeReasoning": "ok", "sections": []}
	assert len(fake.requests) == 1


def test_generate_structured_trims_payload_before_parsing(client, fake) -> None:
	fake.reply_text('\n  [1, 2, 3]  \n')
	assert asyncio.run(client.generate_structured("n", {"type": "array", "items": {"type": "integer"}})) == [1, 2, 3]


@pytest.mark.parametrize(
	"payload",
	[
		"not json",
		"",
		"   \n",
		"NaN",
		"Infinity",
		'{"score": -Infinity}',
		'[1, NaN]',
		"\ufeff{\"overallGrade\": \"B\"}",
		'{"overallGrade": "B"',
		"{'overallGrade': 'B'}",
	],
)
def test_generate_structured_rejects_non_json(client, fake, payload) -> None:
	fake.reply_text(payload)
	with pytest.raises(MalformedResponseError):
		asyncio.run(client.generate_structured("Grade this", GRADE_SCHEMA))
	assert len(fake.requests) == 1


def test_generate_structured_sends_schema_in_generation_config(client, fake) -> None:
	fake.reply_text('{"name": "x"}')
	schema = ObjectSchema(properties={"name": StringSchema(description="A name")}, required=["name"])
	asyncio.run(client.generate_structured("Describe", schema))
	payload = fake.payload()
	assert payload["contents"] == [{"parts": [{"text": "Describe"}]}]
	assert payload["generationConfig"] == {
		"responseMimeType": "application/json",
		"responseSchema": {
			"type": "OBJECT",
			"properties": {"name": {"type": "STRING", "description": "A name"}},
			"required": ["name"],
		},
	}


def test_generate_structured_does_not_revalidate_by_default(client, fake) -> None:
	fake.reply_text('{"overallGrade": "Z"}')
	assert asyncio.run(client.generate_structured("g", GRADE_SCHEMA)) == {"overallGrade": "Z"}


def test_generate_structured_validate_flags_mismatch(client, fake) -> None:
	fake.reply_text('{"overallGrade": "Z", "gradeReasoning": "ok", "sections": [{"title": "t", "score": "9"}]}')
	with pytest.raises(MalformedResponseError) as exc:
		asyncio.run(client.generate_structured("g", GRADE_SCHEMA, validate=True))
	message = str(exc.value)
	assert "$.overallGrade" in message
	assert "$.sections[0].score" in message


def test_generate_structured_validate_accepts_conforming(client, fake) -> None:
	fake.reply_text('{"overallGrade": "A", "gradeReasoning": "ok", "sections": [{"title": "t", "score": 9}]}')
	result = asyncio.run(client.generate_structured("g", GRADE_SCHEMA, validate=True))
	assert result["sections"][0]["score"] == 9


def test_invalid_schema_fails_before_network(client, fake) -> None:
	with pytest.raises(SchemaError):
		asyncio.run(client.generate_structured("g", {"type": "object", "properties": {"a": {"type": "string"}}, "required": ["b"]}))
	assert fake.requests == []


def test_generate_text_returns_text_exactly(client, fake) -> None:
	fake.reply_text("Hello world")
	assert asyncio.run(client.generate_text("Say hello")) == "Hello world"
	assert "generationConfig" not in fake.payload()


def test_generate_text_does_not_trim(client, fake) -> None:
	fake.reply_text("  Hello world\n\n")
	assert asyncio.run(client.generate_text("Say hello")) == "  Hello world\n\n"


def test_generate_text_joins_all_parts(client, fake) -> None:
	fake.reply_text("Hello ", "world")
	assert asyncio.run(client.generate_text("Say hello")) == "Hello world"


def test_empty_prompt_is_forwarded(client, fake) -> None:
	fake.reply_text("?")
	asyncio.run(client.generate_text(""))
	assert fake.prompt() == ""


def test_credential_is_read_on_every_call(store, client, fake) -> None:
	fake.reply_text("ok")
	asyncio.run(client.generate_text("one"))
	store.set("rotated-key")
	asyncio.run(client.generate_text("two"))
	keys = [req.url.params["key"] for req in fake.requests]
	assert keys == ["test-key", "rotated-key"]


def test_cleared_credential_fails_next_call(store, client, fake) -> None:
	fake.reply_text("ok")
	assert asyncio.run(client.generate_text("first")) == "ok"
	store.set("")
	with pytest.raises(MissingCredentialError):
		asyncio.run(client.generate_text("second"))
	assert len(fake.requests) == 1


def test_http_error_becomes_transport_error(client, fake) -> None:
	fake.reply_with(lambda req: httpx.Response(403, json={"error": {"message": "API key not valid"}}))
	with pytest.raises(TransportError) as exc:
		asyncio.run(client.generate_text("x"))
	assert "403" in str(exc.value)
	assert "API key not valid" in str(exc.value)


def test_network_error_becomes_transport_error(client, fake) -> None:
	def _boom(request: httpx.Request) -> httpx.Response:
		raise httpx.ConnectError("connection refused", request=request)

	fake.reply_with(_boom)
	with pytest.raises(TransportError, match="connection refused"):
		asyncio.run(client.generate_text("x"))


def test_unexpected_envelope_becomes_transport_error(client, fake) -> None:
	fake.reply_with(lambda req: httpx.Response(200, json={"promptFeedback": {"blockReason": "SAFETY"}}))
	with pytest.raises(TransportError, match="Unexpected Gemini response"):
		asyncio.run(client.generate_structured("x", GRADE_SCHEMA))


def test_ai_studio_sends_key_as_query_param(client, fake) -> None:
	fake.reply_text("ok")
	asyncio.run(client.generate_text("x"))
	request = fake.requests[0]
	assert request.url.params["key"] == "test-key"
	assert "x-goog-api-key" not in request.headers
	assert str(request.url).startswith(TEST_URL)


def test_vertex_sends_key_as_header(monkeypatch, fake) -> None:
	monkeypatch.setattr(settings, "gemini_provider", "vertex")
	monkeypatch.setattr(settings, "vertex_project", "demo-project")
	client = GeminiClient(MemoryCredentialStore("vertex-key"), model="gemini-2.5-flash", transport=fake.transport)
	assert client.base_url == (
		"https://us-central1-aiplatform.googleapis.com/v1/projects/demo-project/locations/us-central1"
		"/publishers/google/models/gemini-2.5-flash:generateContent"
	)
	fake.reply_text("ok")
	asyncio.run(client.generate_text("x"))
	request = fake.requests[0]
	assert request.headers["x-goog-api-key"] == "vertex-key"
	assert "key" not in request.url.params


def test_default_endpoint_uses_model(fake) -> None:
	client = GeminiClient(MemoryCredentialStore("k"), model="gemini-2.5-pro")
	assert client.base_url == "https://generativelanguage.googleapis.com/v1beta/models/gemini-2.5-pro:generateContent"


def test_nested_array_schema_round_trip(client, fake) -> None:
	fake.reply_text('[{"incident": "OPM", "year": 2015}]')
	schema = ArraySchema(
		items=ObjectSchema(
			properties={"incident": StringSchema(), "year": IntegerSchema()},
			required=["incident", "year"],
		)
	)
	result = asyncio.run(client.generate_structured("timeline", schema, validate=True))
	assert result == [{"incident": "OPM", "year": 2015}]
	assert fake.payload()["generationConfig"]["responseSchema"]["items"]["properties"]["year"] == {"type": "INTEGER"}
