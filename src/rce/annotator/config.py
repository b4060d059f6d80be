"""Credential loading for the timeline annotator."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

DEFAULT_OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1/chat/completions"
DEFAULT_OPENROUTER_MODEL = "meta-llama/llama-3.2-3b-instruct:free"
DEFAULT_OPENROUTER_TIMEOUT_S = 5.0
DEFAULT_OPENROUTER_TITLE = "rce-python-engine"
DEFAULT_CONFIG_PATH = Path("config/openrouter_credentials.json")


@dataclass(frozen=True, slots=True)
class AnnotatorCredentials:
    api_key: str
    model: str
    base_url: str
    timeout_s: float
    referer: str
    title: str
    credentials_path: str

    @property
    def configured(self) -> bool:
        return bool(self.api_key and self.model)


def load_annotator_credentials(path: str | Path | None = None) -> AnnotatorCredentials:
    """Resolve each setting as ENV -> JSON file -> default.

    The JSON file is optional so the API boots without it and the annotator
    falls back to the council's own wording.
    """

    raw_path = (
        str(path).strip()
        if path is not None
        else os.getenv("OPENROUTER_CONFIG_PATH", "").strip()
        or os.getenv("OPENROUTER_CREDENTIALS_FILE", "").strip()
    )
    config_path = Path(raw_path).expanduser() if raw_path else DEFAULT_CONFIG_PATH
    file_data = _read_config(config_path)

    def pick(env_name: str, key: str, default: Any) -> str:
        return str(_coalesce(os.getenv(env_name), file_data.get(key), default)).strip()

    try:
        timeout_s = float(pick("OPENROUTER_TIMEOUT_S", "timeout_s", DEFAULT_OPENROUTER_TIMEOUT_S))
    except ValueError as exc:
        raise ValueError("OpenRouter timeout_s must be a number") from exc
    if timeout_s <= 0:
        raise ValueError("OpenRouter timeout_s must be greater than zero")

    return AnnotatorCredentials(
        api_key=pick("OPENROUTER_API_KEY", "api_key", ""),
        model=pick("OPENROUTER_MODEL", "model", DEFAULT_OPENROUTER_MODEL),
        base_url=pick("OPENROUTER_BASE_URL", "base_url", DEFAULT_OPENROUTER_BASE_URL),
        timeout_s=timeout_s,
        referer=pick("OPENROUTER_HTTP_REFERER", "http_referer", ""),
        title=pick("OPENROUTER_X_TITLE", "x_title", DEFAULT_OPENROUTER_TITLE),
        credentials_path=str(config_path),
    )


def _read_config(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as file_handle:
        raw_data = json.load(file_handle)
    if not isinstance(raw_data, dict):
        raise ValueError("OpenRouter credentials file must contain a JSON object")
    return raw_data


def _coalesce(*values: Any) -> Any:
    """Return first non-empty value, preserving falsy numerics such as 0."""
    for value in values:
        if value is None:
            continue
        if isinstance(value, str) and value.strip() == "":
            continue
        return value
    return ""
