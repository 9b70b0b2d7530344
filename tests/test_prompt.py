from __future__ import annotations

import json
import subprocess

import pytest

from alpa import prompt as prompt_module
from alpa.config import StyleConfig, WindowConfig
from alpa.exceptions import PromptSurfaceError
from alpa.prompt import SingleLinePrompt


def _fake_run(returncode: int = 0, stdout: bytes = b"", stderr: bytes = b"", calls=None):
    def run(cmd, capture_output, check):
        if calls is not None:
            calls.append(cmd)
        return subprocess.CompletedProcess(cmd, returncode, stdout, stderr)

    return run


def test_payload_carries_size_and_style() -> None:
    surface = SingleLinePrompt(WindowConfig(width=500, height=40), StyleConfig(bg_color="#000000"))

    payload = json.loads(surface.payload())

    assert payload["width"] == 500
    assert payload["height"] == 40
    assert payload["style"]["bg_color"] == "#000000"


def test_returns_entered_text(monkeypatch) -> None:
    calls = []
    monkeypatch.setattr(
        prompt_module.subprocess, "run", _fake_run(stdout="héllo\n".encode(), calls=calls),
    )

    text = SingleLinePrompt(WindowConfig(), StyleConfig()).ask()

    assert text == "héllo"
    assert calls[0][1:3] == ["-m", "alpa.prompt_window"]


def test_dismissed_popup_returns_empty(monkeypatch) -> None:
    monkeypatch.setattr(prompt_module.subprocess, "run", _fake_run())

    assert SingleLinePrompt(WindowConfig(), StyleConfig()).ask() == ""


def test_nonzero_exit_is_an_error(monkeypatch) -> None:
    monkeypatch.setattr(prompt_module.subprocess, "run", _fake_run(returncode=1, stderr=b"no display"))

    with pytest.raises(PromptSurfaceError):
        SingleLinePrompt(WindowConfig(), StyleConfig()).ask()


def test_undecodable_output_is_an_error(monkeypatch) -> None:
    monkeypatch.setattr(prompt_module.subprocess, "run", _fake_run(stdout=b"\xff\xfe\xfa"))

    with pytest.raises(PromptSurfaceError):
        SingleLinePrompt(WindowConfig(), StyleConfig()).ask()


def test_launch_failure_is_an_error(monkeypatch) -> None:
    def run(cmd, capture_output, check):
        raise FileNotFoundError("python")

    monkeypatch.setattr(prompt_module.subprocess, "run", run)

    with pytest.raises(PromptSurfaceError):
        SingleLinePrompt(WindowConfig(), StyleConfig()).ask()
