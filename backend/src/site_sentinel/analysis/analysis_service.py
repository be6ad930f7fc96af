from __future__ import annotations

import logging

from agents import Agent, ModelSettings, Runner
from pydantic import BaseModel, Field, field_validator

from site_sentinel.config import DEFAULT_ANALYSIS_MODEL
from site_sentinel.errors import AnalysisError
from site_sentinel.inspector.models import normalize_severity

logger = logging.getLogger(__name__)

NO_RECOMMENDATIONS = "No recommendations generated."
ANALYSIS_FAILED = "Failed to get AI analysis."

DEFAULT_INSTRUCTIONS = """\
You are Site Sentinel, an assistant that helps web developers fix problems
found while loading their site in a headless browser.

- Analyze the error you are given and provide actionable recommendations
  and potential fixes.
- Be concise and focus on practical steps a developer can take.
- Use a short bulleted list. Do not repeat the error details back.
"""


class AnalysisRequest(BaseModel):
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    type: str = Field(min_length=1)
    severity: str = Field(min_length=1)
    url: str | None = None

    @field_validator("severity", mode="before")
    @classmethod
    def _severity_alias(cls, value: object) -> object:
        normalized = normalize_severity(value)
        return getattr(normalized, "value", normalized)


def build_analysis_prompt(request: AnalysisRequest) -> str:
    lines = [
        "Analyze the following web development error and provide actionable "
        "recommendations and potential fixes.",
        "Be concise and focus on practical steps a developer can take.",
        "",
        "Error Details:",
        f"- Title: {request.title}",
        f"- Description: {request.description}",
        f"- Type: {request.type}",
        f"- Severity: {request.severity}",
    ]
    if request.url:
        lines.append(f"- URL: {request.url}")
    lines += ["", "Recommendations and Potential Fixes:"]
    return "\n".join(lines)


def build_analysis_agent(model: str = DEFAULT_ANALYSIS_MODEL, instructions: str = DEFAULT_INSTRUCTIONS) -> Agent:
    """Build a tool-less agent that turns one finding into remediation hints."""
    return Agent(
        name="Site-Sentinel-Analyst",
        instructions=instructions,
        model=model,
        model_settings=ModelSettings(temperature=0.3, max_tokens=250),
    )


async def analyze_finding(request: AnalysisRequest, agent: Agent | None = None) -> str:
    agent = agent or build_analysis_agent()
    prompt = build_analysis_prompt(request)
    try:
        result = await Runner.run(agent, input=prompt)
    except Exception as exc:
        logger.exception("Language model analysis failed for %r", request.title)
        raise AnalysisError(str(exc) or ANALYSIS_FAILED) from exc

    text = str(result.final_output or "").strip()
    return text or NO_RECOMMENDATIONS
