"""Display-server backend driving wlr-randr (wlr-output-management)."""

from __future__ import annotations

import json
import logging
import shlex
import subprocess
from pathlib import Path

from .errors import BackendError
from .models import Output
from .settings import AppSettings
from .utils import backup_file, write_text

log = logging.getLogger(__name__)


def output_args(output: Output) -> list[str]:
    """wlr-randr arguments configuring *output*."""
    if not output.enabled:
        return ["--output", output.name, "--off"]
    mode = output.current_mode
    return [
        "--output", output.name,
        "--on",
        "--mode", f"{mode.width}x{mode.height}@{mode.refresh_rate:.3f}Hz",
        "--pos", f"{output.x},{output.y}",
        "--transform", output.transform.value,
        "--scale", f"{output.scale:g}",
    ]


def generate_script(outputs: list[Output]) -> str:
    """Generate a shell script that restores the arrangement with one wlr-randr call."""
    parts = ["wlr-randr"]
    for o in outputs:
        parts.append("  " + " ".join(shlex.quote(a) for a in output_args(o)))

    cmd = " \\\n".join(parts)
    lines = [
        "#!/bin/sh",
        "# Generated by mangodisplay",
        cmd,
        "",
    ]
    return "\n".join(lines)


class WlrRandr:
    """Query and configure outputs through the wlr-randr command line tool."""

    def __init__(self, executable: str = "wlr-randr") -> None:
        self._exe = executable

    def _run(self, args: list[str]) -> str:
        """Run wlr-randr and return its stdout."""
        try:
            proc = subprocess.run(
                [self._exe, *args],
                capture_output=True,
                text=True,
                check=True,
            )
        except subprocess.CalledProcessError as e:
            detail = (e.stderr or "").strip() or f"exit status {e.returncode}"
            raise BackendError(f"wlr-randr failed: {detail}") from e
        except OSError as e:
            raise BackendError(f"cannot run {self._exe}: {e}") from e
        return proc.stdout

    def get_outputs(self) -> list[Output]:
        """Query all outputs (including disabled). Raises BackendError."""
        try:
            data = json.loads(self._run(["--json"]))
        except json.JSONDecodeError as e:
            raise BackendError(f"invalid wlr-randr output: {e}") from e
        if not isinstance(data, list):
            raise BackendError("invalid wlr-randr output: expected a list")

        outputs: list[Output] = []
        for entry in data:
            if not isinstance(entry, dict):
                log.warning("Skipping malformed output entry: %r", entry)
                continue
            try:
                outputs.append(Output.from_wlr_randr(entry))
            except (ValueError, TypeError, AttributeError) as e:
                log.warning("Skipping output %s: %s", entry.get("name", "?"), e)
        return outputs

    def enumerate_outputs(self) -> list[Output]:
        """Like get_outputs(), but returns an empty list on failure."""
        try:
            outputs = self.get_outputs()
        except BackendError as e:
            log.error("Cannot enumerate outputs: %s", e)
            return []
        log.info("Found %d output(s)", len(outputs))
        return outputs

    def apply(self, outputs: list[Output]) -> None:
        """Push the arrangement to the running compositor."""
        args: list[str] = []
        for o in outputs:
            args.extend(output_args(o))
        if not args:
            return
        log.info("Applying %d output(s)", len(outputs))
        self._run(args)

    def save(self, outputs: list[Output], settings: AppSettings) -> Path:
        """Write the arrangement to settings.monitors_conf_path. Returns the path."""
        path = Path(settings.monitors_conf_path).expanduser()
        try:
            backup_file(path)
            write_text(path, generate_script(outputs))
            path.chmod(0o755)
        except OSError as e:
            raise BackendError(f"cannot write {path}: {e}") from e
        log.info("Saved monitor configuration to %s", path)
        return path
