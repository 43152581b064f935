"""Configuration management for the share-export CLI.

Settings live in a small TOML file; environment variables override it.
Default location: ``~/.config/share-export/config.toml``.
Override with the ``SHARE_EXPORT_CONFIG`` environment variable.
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from share_export.llm.models import OpenAIModel

_DEFAULT_CONFIG_DIR = Path("~/.config/share-export").expanduser()
_DEFAULT_OUTPUT_DIR = Path("./exports")


def _config_path() -> Path:
    env = os.environ.get("SHARE_EXPORT_CONFIG")
    if env:
        return Path(env).expanduser()
    return _DEFAULT_CONFIG_DIR / "config.toml"


@dataclass
class Config:
    openai_api_key: str = ""
    llm_model: str = OpenAIModel.GPT_4O_MINI.value

    # Published rule feed; empty means seed rules only
    rules_url: str = ""

    output_dir: str = str(_DEFAULT_OUTPUT_DIR)
    fetch_timeout: float = 20.0

    # Empty means every strategy
    strategies: list[str] = field(default_factory=list)

    @property
    def semantic_enabled(self) -> bool:
        return bool(self.openai_api_key)

    @property
    def output_path(self) -> Path:
        return Path(self.output_dir)

    def ensure_dirs(self) -> None:
        self.output_path.mkdir(parents=True, exist_ok=True)


# (table, key) in the TOML file -> Config attribute
_FILE_KEYS: tuple[tuple[str, str, str], ...] = (
    ("openai", "api_key", "openai_api_key"),
    ("openai", "model", "llm_model"),
    ("rules", "url", "rules_url"),
    ("output", "dir", "output_dir"),
    ("extraction", "fetch_timeout", "fetch_timeout"),
    ("extraction", "strategies", "strategies"),
)

_ENV_KEYS: tuple[tuple[str, str], ...] = (
    ("OPENAI_API_KEY", "openai_api_key"),
    ("SHARE_EXPORT_RULES_URL", "rules_url"),
    ("SHARE_EXPORT_OUTPUT_DIR", "output_dir"),
)


def load_config() -> Config:
    """Defaults, overlaid by the TOML file, overlaid by the environment."""
    cfg = Config()

    path = _config_path()
    if path.exists():
        data = tomllib.loads(path.read_text(encoding="utf-8"))
        for table, key, attr in _FILE_KEYS:
            if key in data.get(table, {}):
                setattr(cfg, attr, data[table][key])
        cfg.fetch_timeout = float(cfg.fetch_timeout)
        cfg.strategies = list(cfg.strategies)

    for var, attr in _ENV_KEYS:
        if var in os.environ:
            setattr(cfg, attr, os.environ[var])

    return cfg


def save_config(cfg: Config) -> Path:
    """Write config to the TOML file. Returns the path written."""
    path = _config_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    lines = [
        "[openai]",
        f'api_key = "{cfg.openai_api_key}"',
        f'model = "{cfg.llm_model}"',
        "",
    ]

    if cfg.rules_url:
        lines.extend(["[rules]", f'url = "{cfg.rules_url}"', ""])

    lines.extend(["[output]", f'dir = "{cfg.output_dir}"', ""])

    extraction = [f"fetch_timeout = {cfg.fetch_timeout}"]
    if cfg.strategies:
        quoted = ", ".join(f'"{name}"' for name in cfg.strategies)
        extraction.append(f"strategies = [{quoted}]")
    lines.extend(["[extraction]", *extraction, ""])

    path.write_text("\n".join(lines), encoding="utf-8")
    return path


def config_to_dict(cfg: Config) -> dict[str, Any]:
    """Convert CLI Config into the canonical config dict for ShareExport."""
    config: dict[str, Any] = {"fetch": {"timeout": cfg.fetch_timeout}}
    if cfg.openai_api_key:
        config["llm"] = {
            "provider": "openai",
            "api_key": cfg.openai_api_key,
            "model": cfg.llm_model,
        }
    if cfg.rules_url:
        config["rules"] = {"provider": "http", "config": {"url": cfg.rules_url}}
    if cfg.strategies:
        config["strategies"] = {"enabled": cfg.strategies}
    return config


def config_exists() -> bool:
    return _config_path().exists()


def config_path_display() -> str:
    return str(_config_path())
