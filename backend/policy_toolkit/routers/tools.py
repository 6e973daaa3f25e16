from __future__ import annotations
from typing import List, Literal

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field

from .. import tools
from ..deps import get_gemini_client
from ..gemini_client import GeminiClient
from ..report_export import render_report_markdown, report_filename

router = APIRouter(prefix="/tools", tags=["tools"])


def _require(value: str, name: str) -> str:
	if not (value or "").strip():
		raise HTTPException(status_code=400, detail=f"{name} is required")
	return value


class BillRequest(BaseModel):
	bill_text: str


class ReportRequest(BaseModel):
	bill_text: str
	audience: str = "General Public"


class ConstitutionalIssue(BaseModel):
	issue: str
	analysis: str


class BillAnalysis(BaseModel):
	summary: str
	technicalClaims: List[str] = Field(default_factory=list)
	feasibilityAnalysis: str
	constitutionalConcerns: List[ConstitutionalIssue] = Field(default_factory=list)


class TechnicalAnalysis(BaseModel):
	keyClaimsSimplified: str
	feasibilityAssessment: str
	risksAndFlaws: str


class StructuredReport(BaseModel):
	executiveSummary: str
	analogyForLayman: str
	technicalAnalysis: TechnicalAnalysis
	constitutionalImpact: List[ConstitutionalIssue] = Field(default_factory=list)


class ReportExportRequest(BaseModel):
	originalAnalysis: BillAnalysis
	structuredReport: StructuredReport
	audience: str


class TranslateRequest(BaseModel):
	text: str
	audience: str = "General Public"


class SimulationTurn(BaseModel):
	user: str = ""
	model: str = ""


class SimulationRequest(BaseModel):
	history: List[SimulationTurn] = Field(default_factory=list)
	choice: str = "Let's begin."


class ScenarioRequest(BaseModel):
	scenario: str


class MythRequest(BaseModel):
	myth: str


class AiBiasRequest(BaseModel):
	dataset: Literal["skewed", "balanced"]
	outcome: str


class DraftingTurn(BaseModel):
	role: Literal["user", "model"]
	text: str


class DraftingRequest(BaseModel):
	history: List[DraftingTurn] = Field(default_factory=list)
	query: str


class PolicyTextRequest(BaseModel):
	policy_text: str


class AgeVerificationRequest(BaseModel):
	method: str
	exploit: str


@router.post("/breach-timeline")
async def breach_timeline(client: GeminiClient = Depends(get_gemini_client)):
	return await tools.get_breach_timeline(client)


@router.post("/bill-analyzer")
async def bill_analyzer(req: BillRequest, client: GeminiClient = Depends(get_gemini_client)):
	return await tools.analyze_bill(client, _require(req.bill_text, "bill_text"))


@router.post("/report")
async def report_generator(req: ReportRequest, client: GeminiClient = Depends(get_gemini_client)):
	return await tools.generate_report(client, _require(req.bill_text, "bill_text"), _require(req.audience, "audience"))


@router.post("/report/markdown", response_class=PlainTextResponse)
def export_report_markdown(req: ReportExportRequest):
	body = render_report_markdown(req.model_dump())
	headers = {"Content-Disposition": f'attachment; filename="{report_filename(req.audience)}"'}
	return PlainTextResponse(body, media_type="text/markdown; charset=utf-8", headers=headers)


@router.post("/translator")
async def technical_translator(req: TranslateRequest, client: GeminiClient = Depends(get_gemini_client)):
	text = await tools.translate_text(client, _require(req.text, "text"), _require(req.audience, "audience"))
	return {"text": text}


@router.post("/backdoor-simulator")
async def backdoor_simulator(req: SimulationRequest, client: GeminiClient = Depends(get_gemini_client)):
	history = [turn.model_dump() for turn in req.history]
	return await tools.get_simulation_step(client, history, _require(req.choice, "choice"))


@router.get("/policy-comparator/scenarios")
def policy_comparator_scenarios():
	return [{"title": title, "description": desc} for title, desc in tools.POLICY_COMPARISON_SCENARIOS.items()]


@router.post("/policy-comparator")
async def policy_comparator(req: ScenarioRequest, client: GeminiClient = Depends(get_gemini_client)):
	return await tools.compare_policies(client, _require(req.scenario, "scenario"))


@router.post("/surveillance-simulator")
async def surveillance_simulator(req: ScenarioRequest, client: GeminiClient = Depends(get_gemini_client)):
	text = await tools.analyze_surveillance(client, _require(req.scenario, "scenario"))
	return {"text": text}


@router.post("/policy-mythbuster")
async def policy_mythbuster(req: MythRequest, client: GeminiClient = Depends(get_gemini_client)):
	return await tools.bust_myth(client, _require(req.myth, "myth"))


@router.post("/css-simulator")
async def css_simulator(client: GeminiClient = Depends(get_gemini_client)):
	return await tools.analyze_client_side_scanning(client)


@router.post("/ai-bias-simulator")
async def ai_bias_simulator(req: AiBiasRequest, client: GeminiClient = Depends(get_gemini_client)):
	return await tools.analyze_ai_bias(client, req.dataset, _require(req.outcome, "outcome"))


@router.post("/legislative-drafter")
async def legislative_drafter(req: DraftingRequest, client: GeminiClient = Depends(get_gemini_client)):
	history = [turn.model_dump() for turn in req.history]
	text = await tools.get_drafting_advice(client, history, _require(req.query, "query"))
	return {"text": text}


@router.post("/privacy-policy-grader")
async def privacy_policy_grader(req: PolicyTextRequest, client: GeminiClient = Depends(get_gemini_client)):
	return await tools.grade_privacy_policy(client, _require(req.policy_text, "policy_text"))


@router.post("/age-verification-simulator")
async def age_verification_simulator(req: AgeVerificationRequest, client: GeminiClient = Depends(get_gemini_client)):
	text = await tools.analyze_age_verification_exploit(
		client, _require(req.method, "method"), _require(req.exploit, "exploit")
	)
	return {"text": text}
