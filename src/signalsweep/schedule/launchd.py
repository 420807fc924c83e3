"""Launchd scheduling helpers for macOS."""

from __future__ import annotations

import plistlib
import re
import subprocess
from pathlib import Path

import structlog

logger = structlog.get_logger()


DEFAULT_PATH = "/usr/local/bin:/usr/bin:/bin:/usr/sbin:/sbin"
JOB_LABEL = "com.signalsweep.sweep"
PLIST_NAME = f"{JOB_LABEL}.plist"


def _agents_dir() -> Path:
    return Path.home() / "Library" / "LaunchAgents"


def _resolve_program_args(repo_path: Path) -> list[str]:
    sweep_bin = repo_path / ".venv" / "bin" / "signalsweep"
    if sweep_bin.exists():
        return [str(sweep_bin), "sweep"]
    python_bin = repo_path / ".venv" / "bin" / "python"
    if python_bin.exists():
        return [str(python_bin), "-m", "signalsweep.cli", "sweep"]
    return [str(sweep_bin), "sweep"]


def build_sweep_plist(repo_path: Path, logs_dir: Path, interval_seconds: int) -> bytes:
    if interval_seconds <= 0:
        raise ValueError("interval_seconds must be positive")
    payload = {
        "Label": JOB_LABEL,
        "ProgramArguments": _resolve_program_args(repo_path),
        "WorkingDirectory": str(repo_path),
        "StartInterval": interval_seconds,
        "EnvironmentVariables": {"PATH": DEFAULT_PATH},
        "StandardOutPath": str(logs_dir / "sweep.log"),
        "StandardErrorPath": str(logs_dir / "sweep.err"),
        "RunAtLoad": False,
        "KeepAlive": False,
        "Nice": 5,
    }
    return plistlib.dumps(payload)


def install_sweep_launchd(repo_path: Path, interval_seconds: int, load: bool = True) -> Path:
    agents_dir = _agents_dir()
    agents_dir.mkdir(parents=True, exist_ok=True)
    logs_dir = repo_path / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)

    plist_path = agents_dir / PLIST_NAME
    plist_path.write_bytes(build_sweep_plist(repo_path, logs_dir, interval_seconds))

    if load:
        _reload_launchd(plist_path)

    return plist_path


def _reload_launchd(plist_path: Path) -> None:
    subprocess.run(["launchctl", "unload", str(plist_path)], check=False)
    result = subprocess.run(["launchctl", "load", str(plist_path)], check=False, capture_output=True, text=True)
    if result.returncode != 0:
        logger.warning("launchctl load failed", stderr=result.stderr.strip())


def run_now() -> None:
    subprocess.run(["launchctl", "start", JOB_LABEL], check=False)


def uninstall_sweep_launchd() -> dict[str, str | bool | None]:
    plist_path = _agents_dir() / PLIST_NAME
    if not plist_path.exists():
        return {"ok": False, "error": "not_installed"}
    subprocess.run(["launchctl", "unload", str(plist_path)], check=False)
    plist_path.unlink(missing_ok=True)
    return {"ok": True, "error": None}


def get_sweep_status() -> dict[str, str | int | bool | None]:
    plist_path = _agents_dir() / PLIST_NAME
    if not plist_path.exists():
        return {"installed": False}

    payload: dict[str, str | int | bool | None] = {"installed": True, "plist_path": str(plist_path)}
    try:
        plist_data = plistlib.loads(plist_path.read_bytes())
        payload["interval_seconds"] = plist_data.get("StartInterval")
    except plistlib.InvalidFileException as e:
        logger.warning("Unreadable plist", path=str(plist_path), error=str(e))

    uid = subprocess.run(["id", "-u"], check=True, capture_output=True, text=True).stdout.strip()
    result = subprocess.run(
        ["launchctl", "print", f"gui/{uid}/{JOB_LABEL}"],
        check=False,
        capture_output=True,
        text=True,
    )
    if result.returncode != 0:
        payload["loaded"] = False
        payload["error"] = result.stderr.strip() or "launchctl_print_failed"
        return payload

    output = result.stdout
    payload["loaded"] = True
    state_match = re.search(r"state = ([^\n]+)", output)
    pid_match = re.search(r"\bpid = (\d+)", output)
    exit_match = re.search(r"last exit code = (\d+)", output)
    runs_match = re.search(r"runs = (\d+)", output)
    if state_match:
        payload["state"] = state_match.group(1).strip()
    if pid_match:
        payload["pid"] = int(pid_match.group(1))
    if exit_match:
        payload["last_exit_code"] = int(exit_match.group(1))
    if runs_match:
        payload["runs"] = int(runs_match.group(1))
    return payload
