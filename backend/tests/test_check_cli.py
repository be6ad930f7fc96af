from __future__ import annotations

import json

import pytest

from fake_browser import FakeDriver, FakeRequest, FakeResponse, PageScript
from site_sentinel.workflows import check_cli


@pytest.fixture
def fake_driver(monkeypatch: pytest.MonkeyPatch) -> FakeDriver:
    driver = FakeDriver(
        PageScript(response=FakeResponse(status=500, url="https://a.test/", request=FakeRequest(url="https://a.test/")))
    )
    monkeypatch.setattr(check_cli, "PlaywrightDriver", lambda headless=True: driver)
    monkeypatch.setattr(check_cli, "configure_logging", lambda level: None)
    return driver


def test_parser_defaults() -> None:
    args = check_cli.build_parser().parse_args(["https://a.test/"])

    assert args.url == "https://a.test/"
    assert args.project_id == "adhoc"
    assert args.headed is False


def test_main_prints_findings_as_json(fake_driver: FakeDriver, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = check_cli.main(["https://a.test/", "--timeout-ms", "1000"])

    payload = json.loads(capsys.readouterr().out)
    assert exit_code == 1
    assert payload[0]["type"] == "Status Code"
    assert payload[0]["severity"] == "error"
    assert fake_driver.sessions[0].page.goto_calls[0][2] == 1000


def test_launch_failure_exit_code(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    driver = FakeDriver(launch_error=RuntimeError("no browser"))
    monkeypatch.setattr(check_cli, "PlaywrightDriver", lambda headless=True: driver)
    monkeypatch.setattr(check_cli, "configure_logging", lambda level: None)

    assert check_cli.main(["https://a.test/"]) == 2
    assert "no browser" in capsys.readouterr().err
