"""Shared fixtures: output builders and an in-memory display backend."""

from __future__ import annotations

import pytest

from mangodisplay.errors import BackendError
from mangodisplay.models import Output, OutputMode, Transform


def build_output(
    name: str = "DP-1",
    x: int = 0,
    y: int = 0,
    width: int = 1920,
    height: int = 1080,
    scale: float = 1.0,
    transform: Transform = Transform.NORMAL,
    refresh_rates: tuple[float, ...] = (60.0,),
) -> Output:
    modes = [OutputMode(width, height, r, current=(i == 0)) for i, r in enumerate(refresh_rates)]
    return Output(name=name, x=x, y=y, scale=scale, transform=transform, modes=modes)


class FakeBackend:
    """Records apply/save calls; can be told to fail."""

    def __init__(self, outputs: list[Output] | None = None) -> None:
        self.outputs = outputs or []
        self.applied: list[list[Output]] = []
        self.saved: list[tuple[list[Output], object]] = []
        self.fail = False

    def enumerate_outputs(self) -> list[Output]:
        return self.outputs

    def apply(self, outputs: list[Output]) -> None:
        if self.fail:
            raise BackendError("display server unreachable")
        self.applied.append(outputs)

    def save(self, outputs: list[Output], settings) -> None:
        if self.fail:
            raise BackendError("path unwritable")
        self.saved.append((outputs, settings))


@pytest.fixture
def make_output():
    return build_output


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend([
        build_output("DP-1", 0, 0),
        build_output("HDMI-A-1", 1920, 0, refresh_rates=(60.0, 144.0)),
    ])


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep settings and backups out of the real home directory."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
