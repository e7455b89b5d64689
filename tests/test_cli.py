from __future__ import annotations

import argparse
import importlib.util
import json
from pathlib import Path

import pytest

from nyantify_mcp.delivery import DeliveryError, FakeNotificationSink
from nyantify_mcp.focus import FakeFocusProbe


def _load_diag(module_name: str):
    module_path = Path(__file__).resolve().parents[1] / "scripts" / "nyantify_diag.py"
    spec = importlib.util.spec_from_file_location(module_name, module_path)
    assert spec and spec.loader
    diag = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(diag)
    return diag


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for name in ("BARK_KEY", "IDE_BUNDLE_IDS"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


def test_probe_reports_allow_listed_focus(monkeypatch, capsys):
    diag = _load_diag("nyantify_diag_probe_module")
    monkeypatch.setenv("IDE_BUNDLE_IDS", "com.microsoft.VSCode")
    monkeypatch.setattr(diag, "load_probe", lambda _settings: FakeFocusProbe("com.microsoft.VSCode", "Code"))

    diag.cmd_probe(argparse.Namespace())

    payload = json.loads(capsys.readouterr().out)
    assert payload["foreground_id"] == "com.microsoft.VSCode"
    assert payload["foreground_name"] == "Code"
    assert payload["allow_listed"] is True
    assert payload["probe"] == "FakeFocusProbe"


def test_probe_reports_unknown_focus(monkeypatch, capsys):
    diag = _load_diag("nyantify_diag_probe_unknown_module")
    monkeypatch.setattr(diag, "load_probe", lambda _settings: FakeFocusProbe())

    diag.cmd_probe(argparse.Namespace())

    payload = json.loads(capsys.readouterr().out)
    assert payload["foreground_id"] is None
    assert payload["allow_listed"] is False


def test_allowlist_prints_override(monkeypatch, capsys):
    diag = _load_diag("nyantify_diag_allowlist_module")
    monkeypatch.setenv("IDE_BUNDLE_IDS", "b.editor,a.editor")

    diag.cmd_allowlist(argparse.Namespace())

    payload = json.loads(capsys.readouterr().out)
    assert payload["overridden"] is True
    assert payload["identifiers"] == ["a.editor", "b.editor"]


def test_send_delivers_test_notification(monkeypatch, capsys):
    diag = _load_diag("nyantify_diag_send_module")
    sink = FakeNotificationSink()
    monkeypatch.setattr(diag, "load_sink", lambda _settings: sink)

    diag.cmd_send(argparse.Namespace(title="Hello", body="World", level="passive"))

    assert json.loads(capsys.readouterr().out)["sent"] is True
    assert sink.delivered[0].level == "passive"
    assert sink.delivered[0].group == "nyantify-diagnostics"


def test_send_exits_on_delivery_failure(monkeypatch, capsys):
    diag = _load_diag("nyantify_diag_send_failure_module")
    monkeypatch.setattr(
        diag, "load_sink", lambda _settings: FakeNotificationSink(error=DeliveryError("Bark API error: 500"))
    )

    with pytest.raises(SystemExit) as excinfo:
        diag.cmd_send(argparse.Namespace(title="Hello", body="World", level="active"))

    assert excinfo.value.code == 1
    assert "Delivery failed" in capsys.readouterr().err


def test_send_requires_bark_key(capsys):
    diag = _load_diag("nyantify_diag_missing_key_module")

    with pytest.raises(SystemExit):
        diag.main(["send"])

    assert "Bark key missing" in capsys.readouterr().err
