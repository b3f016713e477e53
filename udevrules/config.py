from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from udevrules.common.models import GeneratorOptions, UdevMode


def load_dotenv(path: str | os.PathLike = ".env") -> dict[str, str]:
    """
    Read KEY=VALUE pairs from a .env file into os.environ.

    - Blank lines and comments (# ...) are ignored, as are lines without "=".
    - Matching single or double quotes around a value are stripped.
    - Variables already present in the environment win.

    Returns the pairs that were actually applied.
    """
    p = Path(path)
    applied: dict[str, str] = {}
    if not p.is_file():
        return applied

    for raw in p.read_text(encoding="utf-8").splitlines():
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        k, v = (s.strip() for s in line.split("=", 1))
        if not k:
            continue
        if len(v) >= 2 and v[0] == v[-1] and v[0] in {'"', "'"}:
            v = v[1:-1]
        if k not in os.environ:
            os.environ[k] = v
            applied[k] = v
    return applied


def _env_bool(name: str, default: bool) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    return v.strip().lower() in {"1", "true", "yes", "y", "on"}


@dataclass(frozen=True)
class Settings:
    mode: UdevMode
    group_name: str | None
    rules_out: Path
    sort_vendors: bool
    log_level: str

    @staticmethod
    def load(env_file: str | os.PathLike | None = None) -> "Settings":
        if env_file is not None:
            load_dotenv(env_file)
        # GeneratorOptions owns alias handling and the fallback for unknown modes.
        mode = GeneratorOptions(mode=os.getenv("UDEV_MODE", UdevMode.restricted_group.value)).mode
        group_name = os.getenv("UDEV_GROUP") or None
        rules_out = Path(os.getenv("UDEV_RULES_OUT", "50-hidraw-devices.rules"))
        sort_vendors = _env_bool("UDEV_SORT_VENDORS", False)
        log_level = os.getenv("UDEV_LOG_LEVEL", "WARNING").strip().upper() or "WARNING"
        return Settings(
            mode=mode,
            group_name=group_name,
            rules_out=rules_out,
            sort_vendors=sort_vendors,
            log_level=log_level,
        )

    def generator_options(self) -> GeneratorOptions:
        return GeneratorOptions(mode=self.mode, group_name=self.group_name)
