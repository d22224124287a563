from __future__ import annotations

import json
import os
from pathlib import Path

import pytest

from blockedit import app as app_module


class DummyApp:
    def __init__(self, profile, cache, **kwargs):
        self.profile = profile
        self.cache = cache
        self.kwargs = kwargs
        self.run_called = False

    def run(self) -> int:
        self.run_called = True
        return 0


@pytest.fixture
def settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> dict:
    cfg = {
        "default_profile": "input",
        "targets": {},
        "escape_timeout_ms": 30,
        "log_level": "WARNING",
        "log_file": str(tmp_path / "logs" / "blockedit.log"),
    }
    monkeypatch.setattr(app_module, "load_config", lambda: cfg)
    monkeypatch.setattr(app_module, "setup_logging", lambda *_args: None)
    return cfg


def _factory(created: list[DummyApp]):
    def factory(profile, cache, **kwargs) -> DummyApp:
        instance = DummyApp(profile, cache, **kwargs)
        created.append(instance)
        return instance

    return factory


def test_main_runs_app_for_given_file(settings, tmp_path: Path):
    target = tmp_path / "input.conf"
    target.write_text("input {\n    kb_layout = de\n}\n", encoding="utf-8")
    created: list[DummyApp] = []

    code = app_module.main(["input", "-f", str(target)], app_factory=_factory(created))

    assert code == 0
    (instance,) = created
    assert instance.run_called
    assert instance.profile.name == "input"
    assert instance.cache.lookup("kb_layout", "input") == "de"
    assert instance.kwargs["escape_timeout"] == pytest.approx(0.03)


def test_main_uses_target_from_settings(settings, tmp_path: Path):
    target = tmp_path / "appearance.conf"
    target.write_text("general {\n    gaps_in = 4\n}\n", encoding="utf-8")
    settings["targets"]["appearance"] = str(target)
    created: list[DummyApp] = []

    assert app_module.main(["appearance"], app_factory=_factory(created)) == 0
    assert created[0].cache.path == str(target)


def test_main_reports_missing_file(settings, tmp_path: Path, capsys):
    created: list[DummyApp] = []

    code = app_module.main(["-f", str(tmp_path / "nope.conf")], app_factory=_factory(created))

    assert code == 1
    assert created == []
    assert "Config not found" in capsys.readouterr().err


@pytest.mark.skipif(hasattr(os, "geteuid") and os.geteuid() == 0, reason="root ignores modes")
def test_main_reports_unwritable_file(settings, tmp_path: Path, capsys):
    target = tmp_path / "input.conf"
    target.write_text("x = 1\n", encoding="utf-8")
    target.chmod(0o444)

    code = app_module.main(["-f", str(target)], app_factory=_factory([]))

    assert code == 1
    assert "not writable" in capsys.readouterr().err


def test_main_rejects_unknown_profile(settings, tmp_path: Path, capsys):
    target = tmp_path / "x.conf"
    target.write_text("x = 1\n", encoding="utf-8")

    assert app_module.main(["bogus", "-f", str(target)], app_factory=_factory([])) == 1
    assert "Unknown profile" in capsys.readouterr().err


def test_main_loads_profile_file(settings, tmp_path: Path):
    target = tmp_path / "misc.conf"
    target.write_text("misc {\n    vrr = 1\n}\n", encoding="utf-8")
    profile_path = tmp_path / "misc.json"
    profile_path.write_text(
        json.dumps(
            {
                "name": "misc",
                "title": "Misc",
                "path": str(target),
                "tabs": [
                    {
                        "name": "General",
                        "fields": [
                            {"label": "VRR", "key": "vrr", "type": "int", "block": "misc", "min": 0, "max": 3}
                        ],
                    }
                ],
            }
        ),
        encoding="utf-8",
    )
    created: list[DummyApp] = []

    assert app_module.main(["--profile-file", str(profile_path)], app_factory=_factory(created)) == 0
    assert created[0].profile.title == "Misc"
    assert created[0].cache.lookup("vrr", "misc") == "1"


def test_list_profiles(capsys):
    assert app_module.main(["--list-profiles"]) == 0
    out = capsys.readouterr().out
    assert "input" in out and "appearance" in out


def test_main_reports_undecodable_file(settings, tmp_path: Path, capsys):
    target = tmp_path / "input.conf"
    target.write_bytes(b"input {\n    kb_layout = us \xff\xfe\n}\n")
    created: list[DummyApp] = []

    code = app_module.main(["input", "-f", str(target)], app_factory=_factory(created))

    assert code == 1
    assert created == []
    assert "Could not read config" in capsys.readouterr().err
