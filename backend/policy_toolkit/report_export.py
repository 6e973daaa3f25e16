"""Markdown export for generated policy reports."""
from __future__ import annotations
import re
from typing import Any, Dict, List

_BR = re.compile(r"<br\s*/?>", re.IGNORECASE)
_UNSAFE_FILENAME = re.compile(r"[^A-Za-z0-9._-]+")


def _issues(items: List[Dict[str, Any]], heading: str) -> str:
	return "\n".join(f"\n{heading} {item.get('issue', '')}\n{item.get('analysis', '')}\n" for item in items)


def render_report_markdown(report: Dict[str, Any]) -> str:
	"""Render ``{"originalAnalysis", "structuredReport", "audience"}`` as a Markdown document."""
	structured = report["structuredReport"]
	original = report["originalAnalysis"]
	technical = structured.get("technicalAnalysis") or {}
	claims = "\n".join(f"- {claim}" for claim in original.get("technicalClaims") or [])

	md = f"""
# Policy Analysis Report for: {report.get("audience", "")}

## Executive Summary
{structured.get("executiveSummary", "")}

## The Bottom Line: An Analogy
> {structured.get("analogyForLayman", "")}

---

## Technical Analysis

### What the Bill Requires
{technical.get("keyClaimsSimplified", "")}

### Is it Technically Possible?
{technical.get("feasibilityAssessment", "")}

### Security & Privacy Risks
{technical.get("risksAndFlaws", "")}

---

## Constitutional Impact
{_issues(structured.get("constitutionalImpact") or [], "###")}

---

## Raw Data (For Expert Review)

### Original Summary
{original.get("summary", "")}

### Original Technical Claims
{claims}

### Original Feasibility Analysis
{original.get("feasibilityAnalysis", "")}

### Original Constitutional Concerns
{_issues(original.get("constitutionalConcerns") or [], "####")}
""".strip()
	return _BR.sub("\n", md)


def report_filename(audience: str) -> str:
	safe = _UNSAFE_FILENAME.sub("-", audience).strip("-") or "Audience"
	return f"Policy-Report-For-{safe}.md"
