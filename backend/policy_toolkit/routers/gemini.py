from typing import Any, Dict

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from ..deps import get_gemini_client
from ..gemini_client import GeminiClient

router = APIRouter(prefix="/gemini", tags=["gemini"])


class GenerateRequest(BaseModel):
	prompt: str


class StructuredRequest(BaseModel):
	model_config = ConfigDict(populate_by_name=True)

	prompt: str
	response_schema: Dict[str, Any] = Field(alias="schema")
	# Re-check the parsed JSON against the schema before returning it
	check_schema: bool = Field(default=False, alias="validate")


@router.post("/generate")
async def generate(req: GenerateRequest, client: GeminiClient = Depends(get_gemini_client)):
	text = await client.generate_text(req.prompt)
	return {"text": text}


@router.post("/structured")
async def generate_structured(req: StructuredRequest, client: GeminiClient = Depends(get_gemini_client)):
	data = await client.generate_structured(req.prompt, req.response_schema, validate=req.check_schema)
	return {"data": data}
