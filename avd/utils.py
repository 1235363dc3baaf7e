"""Utility functions for avd-provisioner."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Dict, Mapping, Optional

from avd.constants import _LOG_VERBOSE, SIZE_RE, TRUTHY
from avd.exceptions import ConfigError

_SIZE_FACTORS_MB = {"K": 1 / 1024, "": 1, "M": 1, "G": 1024, "T": 1024 * 1024}


def log(level: str, message: str) -> None:
    """Print a colour-tagged '[LEVEL] message' line; DEBUG only when LOG_VERBOSE is set."""
    if level == "DEBUG" and not _LOG_VERBOSE:
        return
    colours = {
        "INFO": "\033[0;34m",
        "WARN": "\033[1;33m",
        "ERROR": "\033[0;31m",
        "SUCCESS": "\033[0;32m",
        "DEBUG": "\033[0;90m",
    }
    colour = colours.get(level, "")
    reset = "\033[0m" if colour else ""
    print(f"{colour}[{level}]{reset} {message}", flush=True)


def get_env(name: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(name, default)


def get_env_bool(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.lower() in TRUTHY


def parse_int_env(name: str, default: str, min_val: int = 1, max_val: Optional[int] = None) -> int:
    raw = get_env(name, default)
    assert raw is not None
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(name, f"must be an integer (got '{raw}')")
    if value < min_val:
        raise ConfigError(name, f"must be >= {min_val} (got {value})")
    if max_val is not None and value > max_val:
        raise ConfigError(name, f"must be <= {max_val} (got {value})")
    return value


def ensure_directory(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def parse_properties(text: str) -> Dict[str, str]:
    """Parse ``key=value`` lines; ``#`` comments and blank lines are skipped."""
    props: Dict[str, str] = {}
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            continue
        key, value = stripped.split("=", 1)
        props[key.strip()] = value.strip()
    return props


def read_properties(path: Path) -> Dict[str, str]:
    return parse_properties(path.read_text(encoding="utf-8"))


def write_properties(path: Path, props: Mapping[str, str]) -> None:
    """Write a properties file atomically (temp file in the same directory, then rename)."""
    lines = [f"{key}={value}" for key, value in sorted(props.items())]
    payload = "\n".join(lines) + "\n"
    with tempfile.NamedTemporaryFile(
        "w", encoding="utf-8", delete=False, dir=path.parent, prefix=f".{path.name}."
    ) as tmp:
        tmp_path = Path(tmp.name)
        try:
            tmp.write(payload)
        except Exception:
            tmp_path.unlink(missing_ok=True)
            raise
    tmp_path.replace(path)


def parse_size_to_mb(raw: Optional[str]) -> Optional[int]:
    """Convert '1536', '1536M', '2G' or '512 MB' to MiB. A bare 'B' suffix means bytes.

    Returns None when unparseable.
    """
    if raw is None:
        return None
    match = SIZE_RE.match(raw)
    if not match:
        return None
    number, unit, byte_suffix = match.groups()
    if byte_suffix and not unit:
        return int(number) // (1024 * 1024)
    return int(int(number) * _SIZE_FACTORS_MB[unit.upper()])
