from __future__ import annotations

import asyncio
from types import SimpleNamespace

import pytest

from site_sentinel.analysis import analysis_service
from site_sentinel.analysis.analysis_service import (
    NO_RECOMMENDATIONS,
    AnalysisRequest,
    analyze_finding,
    build_analysis_agent,
    build_analysis_prompt,
)
from site_sentinel.errors import AnalysisError


def _request(**overrides) -> AnalysisRequest:
    data = {
        "title": "Potential SSL Error",
        "description": "net::ERR_CERT_AUTHORITY_INVALID",
        "type": "SSL",
        "severity": "critical",
        "url": "https://shop.test/",
    }
    data.update(overrides)
    return AnalysisRequest(**data)


def test_prompt_carries_error_details() -> None:
    prompt = build_analysis_prompt(_request())

    assert "- Title: Potential SSL Error" in prompt
    assert "- Type: SSL" in prompt
    assert "- Severity: error" in prompt
    assert "- URL: https://shop.test/" in prompt
    assert prompt.endswith("Recommendations and Potential Fixes:")


def test_prompt_omits_missing_url() -> None:
    assert "URL:" not in build_analysis_prompt(_request(url=None))


def test_agent_uses_configured_model() -> None:
    agent = build_analysis_agent("gpt-test")

    assert agent.model == "gpt-test"
    assert agent.tools == []


def test_analyze_returns_trimmed_output(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: dict[str, str] = {}

    async def fake_run(agent, input):
        seen["input"] = input
        return SimpleNamespace(final_output="  - Renew the certificate.\n")

    monkeypatch.setattr(analysis_service.Runner, "run", fake_run)

    text = asyncio.run(analyze_finding(_request(), agent=build_analysis_agent("gpt-test")))

    assert text == "- Renew the certificate."
    assert "Potential SSL Error" in seen["input"]


def test_empty_output_has_placeholder(monkeypatch: pytest.MonkeyPatch) -> None:
    async def fake_run(agent, input):
        return SimpleNamespace(final_output="")

    monkeypatch.setattr(analysis_service.Runner, "run", fake_run)

    assert asyncio.run(analyze_finding(_request(), agent=build_analysis_agent("gpt-test"))) == NO_RECOMMENDATIONS


def test_model_failure_is_one_opaque_error(monkeypatch: pytest.MonkeyPatch) -> None:
    async def fake_run(agent, input):
        raise RuntimeError("insufficient_quota")

    monkeypatch.setattr(analysis_service.Runner, "run", fake_run)

    with pytest.raises(AnalysisError, match="insufficient_quota"):
        asyncio.run(analyze_finding(_request(), agent=build_analysis_agent("gpt-test")))
