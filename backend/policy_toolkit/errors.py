"""Errors raised by the generation client.

Every failure is scoped to a single call; nothing here is fatal to the process.
"""
from __future__ import annotations


class GenerationError(Exception):
	"""Base class for failures of a single generation call."""


class MissingCredentialError(GenerationError):
	def __init__(self, message: str = "Gemini API key is not set. Please configure it in the settings.") -> None:
		super().__init__(message)


class TransportError(GenerationError):
	"""Network or endpoint-level failure; message comes from the underlying call."""


class MalformedResponseError(GenerationError):
	"""The endpoint answered, but not with the JSON that was asked for."""


class SchemaError(ValueError):
	"""A schema descriptor is structurally invalid."""
