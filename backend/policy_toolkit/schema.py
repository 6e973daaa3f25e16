"""Schema descriptors for structured generation.

A descriptor says what shape of JSON a tool expects back. It is validated once
when built (or parsed from a plain mapping), rendered to Gemini's
``responseSchema`` format for the request, and can optionally be used to check
a parsed response.

Plain mappings may use either the lower-case tags used here
(``{"type": "object", "properties": {...}, "required": [...]}``) or Gemini's
upper-case ones (``"OBJECT"``, ``"STRING"`` with ``"format": "enum"``...).
"""
from abc import ABC, abstractmethod
from typing import Annotated, Any, Dict, List, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, model_validator

from .errors import SchemaError


class SchemaNode(BaseModel, ABC):
	"""Abstract base of every descriptor node."""

	model_config = ConfigDict(extra="forbid")

	description: Optional[str] = None

	def _render(self, out: Dict[str, Any]) -> Dict[str, Any]:
		if self.description:
			out["description"] = self.description
		return out

	@abstractmethod
	def to_gemini(self) -> Dict[str, Any]:
		"""Render as a Gemini ``responseSchema`` fragment."""

	@abstractmethod
	def problems(self, value: Any, path: str = "$") -> List[str]:
		"""List every way ``value`` fails to conform; empty when it conforms."""


class StringSchema(SchemaNode):
	type: Literal["string"] = "string"

	def to_gemini(self) -> Dict[str, Any]:
		return self._render({"type": "STRING"})

	def problems(self, value: Any, path: str = "$") -> List[str]:
		return [] if isinstance(value, str) else [f"{path}: expected string"]


class IntegerSchema(SchemaNode):
	type: Literal["integer"] = "integer"

	def to_gemini(self) -> Dict[str, Any]:
		return self._render({"type": "INTEGER"})

	def problems(self, value: Any, path: str = "$") -> List[str]:
		# bool is an int subclass but not a JSON integer
		if isinstance(value, int) and not isinstance(value, bool):
			return []
		return [f"{path}: expected integer"]


class NumberSchema(SchemaNode):
	type: Literal["number"] = "number"

	def to_gemini(self) -> Dict[str, Any]:
		return self._render({"type": "NUMBER"})

	def problems(self, value: Any, path: str = "$") -> List[str]:
		if isinstance(value, (int, float)) and not isinstance(value, bool):
			return []
		return [f"{path}: expected number"]


class BooleanSchema(SchemaNode):
	type: Literal["boolean"] = "boolean"

	def to_gemini(self) -> Dict[str, Any]:
		return self._render({"type": "BOOLEAN"})

	def problems(self, value: Any, path: str = "$") -> List[str]:
		return [] if isinstance(value, bool) else [f"{path}: expected boolean"]


class EnumSchema(SchemaNode):
	type: Literal["enum"] = "enum"
	values: List[str] = Field(min_length=1)

	def to_gemini(self) -> Dict[str, Any]:
		return self._render({"type": "STRING", "format": "enum", "enum": list(self.values)})

	def problems(self, value: Any, path: str = "$") -> List[str]:
		if isinstance(value, str) and value in self.values:
			return []
		return [f"{path}: expected one of {self.values}"]


class ArraySchema(SchemaNode):
	type: Literal["array"] = "array"
	items: "SchemaDescriptor"

	def to_gemini(self) -> Dict[str, Any]:
		return self._render({"type": "ARRAY", "items": self.items.to_gemini()})

	def problems(self, value: Any, path: str = "$") -> List[str]:
		if not isinstance(value, list):
			return [f"{path}: expected array"]
		found: List[str] = []
		for i, item in enumerate(value):
			found.extend(self.items.problems(item, f"{path}[{i}]"))
		return found


class ObjectSchema(SchemaNode):
	type: Literal["object"] = "object"
	properties: Dict[str, "SchemaDescriptor"] = Field(min_length=1)
	required: List[str] = Field(default_factory=list)

	@model_validator(mode="after")
	def _required_are_declared(self) -> "ObjectSchema":
		unknown = [name for name in self.required if name not in self.properties]
		if unknown:
			raise ValueError(f"required names not in properties: {unknown}")
		if len(set(self.required)) != len(self.required):
			raise ValueError("required names must be unique")
		return self

	def to_gemini(self) -> Dict[str, Any]:
		out: Dict[str, Any] = {
			"type": "OBJECT",
			"properties": {name: prop.to_gemini() for name, prop in self.properties.items()},
		}
		if self.required:
			out["required"] = list(self.required)
		return self._render(out)

	def problems(self, value: Any, path: str = "$") -> List[str]:
		if not isinstance(value, dict):
			return [f"{path}: expected object"]
		found = [f"{path}.{name}: missing required field" for name in self.required if name not in value]
		for name, prop in self.properties.items():
			if name in value:
				found.extend(prop.problems(value[name], f"{path}.{name}"))
		return found


SchemaDescriptor = Annotated[
	Union[StringSchema, IntegerSchema, NumberSchema, BooleanSchema, EnumSchema, ArraySchema, ObjectSchema],
	Field(discriminator="type"),
]

ArraySchema.model_rebuild()
ObjectSchema.model_rebuild()

_ADAPTER: TypeAdapter = TypeAdapter(SchemaDescriptor)


def _normalize(spec: Any) -> Any:
	"""Lower-case Gemini type tags and fold ``format: enum`` strings into enum nodes."""
	if not isinstance(spec, Mapping):
		return spec
	out = dict(spec)
	tag = out.get("type")
	if isinstance(tag, str):
		tag = tag.lower()
		if tag == "string" and out.get("format") == "enum":
			tag = "enum"
			out.pop("format")
			out["values"] = out.pop("enum", [])
		out["type"] = tag
	if "items" in out:
		out["items"] = _normalize(out["items"])
	if isinstance(out.get("properties"), Mapping):
		out["properties"] = {name: _normalize(prop) for name, prop in out["properties"].items()}
	# Gemini's optional key ordering hint has no meaning for a descriptor
	out.pop("propertyOrdering", None)
	return out


def parse_schema(spec: Union[SchemaNode, Mapping[str, Any]]) -> SchemaNode:
	"""Return a validated descriptor, raising SchemaError if ``spec`` is not one."""
	if isinstance(spec, SchemaNode):
		return spec
	if not isinstance(spec, Mapping):
		raise SchemaError(f"schema must be a mapping or descriptor, got {type(spec).__name__}")
	try:
		return _ADAPTER.validate_python(_normalize(spec))
	except ValidationError as e:
		raise SchemaError(f"invalid schema descriptor: {e}") from e
