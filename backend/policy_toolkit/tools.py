"""Prompt and schema definitions for each toolkit tool.

Every tool is a thin async wrapper: build a prompt, optionally pair it with a
schema, hand both to the client and return whatever comes back.
"""
from __future__ import annotations
from typing import Any, Dict, List, Literal, Sequence

from .gemini_client import GeminiClient
from .schema import ArraySchema, EnumSchema, IntegerSchema, ObjectSchema, StringSchema


def _text(description: str | None = None) -> StringSchema:
	return StringSchema(description=description)


def _issue_list(issue_hint: str, analysis_hint: str, description: str | None = None) -> ArraySchema:
	return ArraySchema(
		description=description,
		items=ObjectSchema(
			properties={"issue": _text(issue_hint), "analysis": _text(analysis_hint)},
			required=["issue", "analysis"],
		),
	)


# ---- Breach timeline ----

BREACH_TIMELINE_SCHEMA = ArraySchema(
	items=ObjectSchema(
		properties={
			"incident": _text("Name of the data breach incident."),
			"year": IntegerSchema(description="Year the breach was disclosed or occurred."),
			"impact": _text("Brief summary of the breach's impact."),
			"rootCause": _text("The primary root cause of the breach."),
		},
		required=["incident", "year", "impact", "rootCause"],
	),
)


async def get_breach_timeline(client: GeminiClient) -> List[Dict[str, Any]]:
	prompt = (
		"Generate a list of 5 significant historical government or government-related data breaches. "
		"For each breach, provide the incident name, year, a brief summary of the impact, and the primary root cause."
	)
	return await client.generate_structured(prompt, BREACH_TIMELINE_SCHEMA)


# ---- Bill analyzer ----

BILL_ANALYSIS_SCHEMA = ObjectSchema(
	properties={
		"summary": _text("A concise summary of the bill's purpose and main provisions."),
		"technicalClaims": ArraySchema(
			items=_text(),
			description="Key technical assumptions or requirements mentioned in the bill.",
		),
		"feasibilityAnalysis": _text(
			"An analysis of the technical feasibility of the claims, highlighting potential challenges."
		),
		"constitutionalConcerns": _issue_list(
			"The constitutional issue (e.g., 'Fourth Amendment - Unreasonable Search').",
			"Brief analysis of why this is a concern for the provided bill text.",
			"A list of potential constitutional issues raised by the bill.",
		),
	},
	required=["summary", "technicalClaims", "feasibilityAnalysis", "constitutionalConcerns"],
)


def build_bill_analysis_prompt(bill_text: str) -> str:
	return (
		"Analyze the following legislative bill text. Provide a concise summary, identify key technical claims, "
		"analyze their feasibility, and list potential constitutional concerns (e.g., First, Fourth Amendment).\n\n"
		f"Bill Text:\n---\n{bill_text}\n---\n"
	)


async def analyze_bill(client: GeminiClient, bill_text: str) -> Dict[str, Any]:
	return await client.generate_structured(build_bill_analysis_prompt(bill_text), BILL_ANALYSIS_SCHEMA)


# ---- Report generator ----

STRUCTURED_REPORT_SCHEMA = ObjectSchema(
	properties={
		"executiveSummary": _text(
			"A high-level summary of the bill's purpose and its most critical implications, written for the target audience."
		),
		"analogyForLayman": _text(
			"A simple, powerful analogy to explain the core technical or privacy issue to a non-expert."
		),
		"technicalAnalysis": ObjectSchema(
			properties={
				"keyClaimsSimplified": _text("A one-sentence summary of what the bill is technically asking for."),
				"feasibilityAssessment": _text(
					"An assessment of whether the technical claims are possible, explained simply."
				),
				"risksAndFlaws": _text(
					"A description of the security, privacy, or operational risks if the bill were implemented."
				),
			},
			required=["keyClaimsSimplified", "feasibilityAssessment", "risksAndFlaws"],
		),
		"constitutionalImpact": _issue_list(
			"The constitutional issue (e.g., 'First Amendment').",
			"A simplified explanation of the constitutional concern for the target audience.",
		),
	},
	required=["executiveSummary", "analogyForLayman", "technicalAnalysis", "constitutionalImpact"],
)


def build_report_prompt(analysis: Dict[str, Any], audience: str) -> str:
	# The analysis comes straight from the endpoint, so any key may be missing or null
	claims = "; ".join(str(claim) for claim in analysis.get("technicalClaims") or [])
	concerns = "\n".join(
		f"- {c.get('issue', '')}: {c.get('analysis', '')}"
		for c in analysis.get("constitutionalConcerns") or []
		if isinstance(c, dict)
	)
	return (
		"You are a senior policy analyst and technical writer. Your task is to transform a raw technical and legal "
		"analysis of a bill into a clear, structured, and impactful report for a specific audience. "
		"The output must be in JSON format.\n\n"
		f"**Audience:** '{audience}'\n\n"
		"**Raw Analysis Input:**\n---\n"
		f"Summary: {analysis.get('summary', '')}\n"
		f"Technical Claims: {claims}\n"
		f"Feasibility: {analysis.get('feasibilityAnalysis', '')}\n"
		f"Constitutional Concerns:\n{concerns}\n---\n\n"
		"**Instructions:**\n"
		"Based on the raw analysis, generate a structured JSON report. Your explanations should be simplified for "
		"the target audience but retain analytical depth. Adopt an authoritative tone. Structure your response "
		"according to the provided JSON schema. For 'analogyForLayman', create a powerful and simple analogy that "
		"captures the core technical or privacy issue at stake. For 'risksAndFlaws', elaborate on the security and "
		"privacy dangers implied by the feasibility analysis. For 'keyClaimsSimplified', summarize the technical "
		"requirements in a single, clear statement.\n"
	)


async def translate_analysis_to_report(client: GeminiClient, analysis: Dict[str, Any], audience: str) -> Dict[str, Any]:
	return await client.generate_structured(build_report_prompt(analysis, audience), STRUCTURED_REPORT_SCHEMA)


async def generate_report(client: GeminiClient, bill_text: str, audience: str) -> Dict[str, Any]:
	"""Analyze a bill, then rewrite the analysis as a report for ``audience``.

	Two generation calls; a failure in either propagates unchanged.
	"""
	analysis = await analyze_bill(client, bill_text)
	report = await translate_analysis_to_report(client, analysis, audience)
	return {"originalAnalysis": analysis, "structuredReport": report, "audience": audience}


# ---- Technical translator ----

async def translate_text(client: GeminiClient, text: str, audience: str) -> str:
	prompt = (
		f"Translate the following complex technical text into clear, simple language suitable for a '{audience}'. "
		"Focus on the core concepts and implications.\n\n"
		f"Technical Text:\n---\n{text}\n---\n"
	)
	return await client.generate_text(prompt)


# ---- Backdoor simulator ----

SIMULATION_STEP_SCHEMA = ObjectSchema(
	properties={
		"narrative": _text("The next part of the story, explaining the consequences of the user's choice."),
		"choices": ArraySchema(items=_text(), description="Two or three choices the user can make next."),
	},
	required=["narrative", "choices"],
)


async def get_simulation_step(client: GeminiClient, history: Sequence[Dict[str, str]], choice: str) -> Dict[str, Any]:
	"""``history`` holds {"user": ..., "model": ...} turns; only the last model turn is sent."""
	situation = history[-1].get("model", "") if history else "The user is starting the scenario."
	prompt = (
		"You are an interactive fiction engine simulating the consequences of tech policy decisions. "
		"The user is in a scenario about encryption backdoors. Continue the story based on their last choice "
		"and present 2-3 new choices. The narrative should be dramatic and educational, explaining the technical "
		"and societal implications.\n\n"
		f"Current situation: {situation}\n\n"
		f"User's last choice: {choice}\n"
	)
	return await client.generate_structured(prompt, SIMULATION_STEP_SCHEMA)


# ---- Policy comparator ----

POLICY_COMPARISON_SCENARIOS: Dict[str, str] = {
	"A Company Data Breach": "A social media company announces a major data breach affecting millions of users.",
	"Data Deletion Request": "A user requests that a company permanently delete all of their personal data.",
	"New User Signup": "A user signs up for a new online service and is presented with a privacy policy.",
	"Data Portability Request": "A user wants to move their data (e.g., photos, contacts) from one platform to another.",
}


def _comparison_section(regime: str) -> ObjectSchema:
	return ObjectSchema(
		description=f"How {regime} handles the scenario.",
		properties={
			"corePrinciple": _text("The core legal principle that applies."),
			"userRights": _text("The rights the user has in this scenario."),
			"businessObligations": _text("What the business is obliged to do."),
			"enforcement": _text("How the obligations are enforced and what penalties apply."),
		},
		required=["corePrinciple", "userRights", "businessObligations", "enforcement"],
	)


POLICY_COMPARISON_SCHEMA = ObjectSchema(
	properties={
		"gdpr": _comparison_section("the EU's GDPR"),
		"usPolicy": _comparison_section("the U.S. sector-specific approach"),
	},
	required=["gdpr", "usPolicy"],
)


async def compare_policies(client: GeminiClient, scenario: str) -> Dict[str, Any]:
	prompt = (
		"Compare the following policy scenario in terms of privacy, security, and societal impact under the EU's "
		"GDPR and the U.S. sector-specific approach.\n\n"
		f"Scenario:\n{scenario}\n---\n"
	)
	return await client.generate_structured(prompt, POLICY_COMPARISON_SCHEMA)


# ---- Surveillance simulator ----

async def analyze_surveillance(client: GeminiClient, scenario: str) -> str:
	prompt = (
		"As a privacy and civil liberties expert, analyze the following facial recognition scenario. "
		"Explain the implications in detail, covering:\n"
		"1.  **Accuracy & False Positives**: The risks of misidentification.\n"
		"2.  **Privacy Erosion**: How it enables mass tracking and permanent records.\n"
		"3.  **Chilling Effects**: The impact on free speech, association, and protest.\n"
		"4.  **Algorithmic Bias**: The potential for disproportionate impact on marginalized communities.\n\n"
		f"Scenario:\n---\n{scenario}\n---\n"
	)
	return await client.generate_text(prompt)


# ---- Policy mythbuster ----

MYTH_BUSTER_SCHEMA = ObjectSchema(
	properties={
		"myth": _text("The original myth provided."),
		"reality": _text("A concise, forceful counter-argument that states the reality."),
		"technicalBreakdown": _text(
			"A detailed explanation of why the myth is technically flawed, impossible, or dangerous. "
			"Use analogies if helpful."
		),
		"ethicalFallout": _text(
			"An analysis of the constitutional, ethical, and human rights at stake if policy were based on this myth."
		),
		"precedent": _text(
			"A historical example or precedent where similar logic has led to negative consequences "
			"(e.g., previous surveillance programs, data breaches)."
		),
	},
	required=["myth", "reality", "technicalBreakdown", "ethicalFallout", "precedent"],
)


async def bust_myth(client: GeminiClient, myth: str) -> Dict[str, Any]:
	prompt = (
		"You are a digital rights advocate and cybersecurity expert. Authoritatively debunk the following common "
		"myth used to justify anti-privacy policies. Provide a detailed, evidence-based analysis.\n\n"
		f'Myth: "{myth}"'
	)
	return await client.generate_structured(prompt, MYTH_BUSTER_SCHEMA)


# ---- Client-side scanning simulator ----

CSS_ANALYSIS_SCHEMA = ObjectSchema(
	properties={
		"privacyFailure": _text("How a private scan becomes a warrantless search upon reporting."),
		"technicalVulnerability": _text("The dangers of the secret blocklist (hash list)."),
		"chillingEffect": _text("How constant scanning deters free expression."),
	},
	required=["privacyFailure", "technicalVulnerability", "chillingEffect"],
)


async def analyze_client_side_scanning(client: GeminiClient) -> Dict[str, Any]:
	prompt = (
		"Analyze the privacy implications of a client-side scanning (CSS) system that has just resulted in a "
		"\"false positive\" flag on an innocent user's private photo.\n"
		"Explain in three distinct sections:\n"
		"1.  **Privacy Failure**: Describe how a supposedly private on-device scan becomes a warrantless search "
		"the moment a report is sent.\n"
		"2.  **Technical Vulnerability**: Explain the danger of the secret, centralized blocklist (hash list) and "
		"the inevitability of its abuse or leakage.\n"
		"3.  **Chilling Effect**: Detail how knowing that all personal data is being constantly scanned deters "
		"free expression and association.\n"
	)
	return await client.generate_structured(prompt, CSS_ANALYSIS_SCHEMA)


# ---- AI bias simulator ----

AI_BIAS_SCHEMA = ObjectSchema(
	properties={
		"explanation": _text("Why the AI produced the result based on the chosen dataset."),
		"feedbackLoop": _text("Explanation of a discriminatory feedback loop in this context."),
		"solution": _text("A better, rights-respecting approach."),
	},
	required=["explanation", "feedbackLoop", "solution"],
)

DatasetChoice = Literal["skewed", "balanced"]


async def analyze_ai_bias(client: GeminiClient, dataset: DatasetChoice, outcome: str) -> Dict[str, Any]:
	prompt = (
		"A user has just run an AI bias simulation for predicting criminal recidivism.\n"
		f"- The user chose the \"{dataset}\" dataset.\n"
		f"- The outcome was: \"{outcome}\"\n\n"
		"Please provide an analysis in three sections:\n"
		"1.  **Explanation**: Explain exactly why the AI produced this result based on the chosen dataset. "
		"If skewed, explain how it learned to correlate unrelated factors (like zip code) with risk. "
		"If balanced, explain why the outcomes were more equitable.\n"
		"2.  **Feedback Loop**: Describe the concept of a \"discriminatory feedback loop\" and how using this AI's "
		"biased predictions in the real world would worsen the initial bias in future data.\n"
		"3.  **Solution**: Briefly propose a better, rights-respecting approach to this problem that doesn't rely "
		"on biased predictive algorithms.\n"
	)
	return await client.generate_structured(prompt, AI_BIAS_SCHEMA)


# ---- Legislative drafter ----

def format_drafting_history(history: Sequence[Dict[str, str]]) -> str:
	return "\n".join(
		f"{'User' if item.get('role') == 'user' else 'Counsel'}: {item.get('text', '')}" for item in history
	)


async def get_drafting_advice(client: GeminiClient, history: Sequence[Dict[str, str]], query: str) -> str:
	prompt = (
		"You are an expert legislative counsel specializing in technology and constitutional law. Your role is to "
		"act as a Socratic guide for a user trying to draft tech policy. Do not just write the law for them. "
		"Instead, ask critical questions that force them to confront the technical, privacy, and constitutional "
		"implications of their ideas. Refer to the tools in this toolkit (e.g., CSS Simulator, Policy Comparator) "
		"as examples.\n\n"
		f"**Conversation History:**\n{format_drafting_history(history)}\n\n"
		f"**User's Latest Goal:**\n\"{query}\"\n\n"
		"Your task is to respond as the Counsel. Ask probing questions. Point out potential flaws. Suggest they "
		"consider alternatives or look at precedents. Keep your response concise and focused on guiding their "
		"thinking.\n"
	)
	return await client.generate_text(prompt)


# ---- Privacy policy grader ----

PRIVACY_GRADE_SCHEMA = ObjectSchema(
	properties={
		"overallGrade": EnumSchema(
			values=["A", "B", "C", "D", "F"],
			description="The final letter grade for the policy.",
		),
		"gradeReasoning": _text("A concise summary explaining why the policy received this grade."),
		"sections": ArraySchema(
			description="A detailed breakdown of the policy's performance in key areas.",
			items=ObjectSchema(
				properties={
					"title": _text(),
					"score": IntegerSchema(description="Score from 0 (worst) to 10 (best)."),
					"analysis": _text("Brief analysis for this section."),
				},
				required=["title", "score", "analysis"],
			),
		),
	},
	required=["overallGrade", "gradeReasoning", "sections"],
)


async def grade_privacy_policy(client: GeminiClient, policy_text: str) -> Dict[str, Any]:
	prompt = (
		"You are a privacy expert tasked with grading a privacy policy. Analyze the provided text and assign a "
		"grade from A (excellent) to F (failing).\n"
		"Your analysis must be structured as a JSON object according to the provided schema.\n\n"
		"Base your grade and analysis on these key areas:\n"
		"1.  **Data Collection**: Does it practice data minimization or collect everything possible? "
		"Is it clear what is collected?\n"
		"2.  **Data Sharing/Selling**: Is data shared with third parties or \"partners\"? Is it sold? "
		"Is the language clear or vague?\n"
		"3.  **User Rights & Control**: How easy is it for users to access, edit, or delete their data? "
		"Are these rights prominent?\n"
		"4.  **Clarity & Readability**: Is the policy written in clear, simple language, or is it dense "
		"legal-ese designed to obscure?\n"
		"5.  **Security**: Does it mention security practices like encryption?\n\n"
		"Provide an overall grade, a summary of your reasoning, and a score (0-10) and analysis for each of the "
		"4 main sections (Clarity, Collection, Sharing, Control).\n\n"
		f"**Privacy Policy Text to Analyze:**\n---\n{policy_text}\n---\n"
	)
	return await client.generate_structured(prompt, PRIVACY_GRADE_SCHEMA)


# ---- Age verification simulator ----

async def analyze_age_verification_exploit(client: GeminiClient, method: str, exploit: str) -> str:
	prompt = (
		"Analyze the following age verification method and describe a plausible exploit.\n\n"
		f"Method: **{method}**\n\n"
		f"Exploit being simulated:\n**{exploit}**\n"
	)
	return await client.generate_text(prompt)
