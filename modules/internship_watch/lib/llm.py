from __future__ import annotations

import logging
import os
from dataclasses import dataclass

log = logging.getLogger(__name__)


def _get_float_env(name: str | None, default: float) -> float:
    if not name:
        return default
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        log.warning("Invalid float in %s=%r; using default %s", name, raw, default)
        return default


@dataclass
class OpenAIChat:
    """
    Thin facade over openai.chat.completions with:
      - model loaded from env via `model_env` (or `default_model` if unset)
      - temperature from `temp_env` (if set) else `default_temperature`
      - optional JSON-object response mode
    """

    model_env: str = "OPENAI_MODEL_INTERNSHIP"
    temp_env: str = "OPENAI_TEMP_INTERNSHIP"
    api_key_env: str = "OPENAI_API_KEY"
    default_model: str = "gpt-4.1-mini"
    default_temperature: float = 0.0

    def chat(self, system_msg: str, user_msg: str, *, json_mode: bool = False) -> str:
        from openai import OpenAI  # local import to keep tests light

        model = os.getenv(self.model_env) or self.default_model
        api_key = os.getenv(self.api_key_env)
        if not api_key:
            raise RuntimeError(f"{self.api_key_env} not set")
        temp = _get_float_env(self.temp_env, self.default_temperature)

        log.debug("OpenAIChat.chat(model=%r, temperature=%s, json_mode=%s)", model, temp, json_mode)
        client = OpenAI(api_key=api_key)
        kwargs = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        resp = client.chat.completions.create(
            model=model,
            messages=[{"role": "system", "content": system_msg}, {"role": "user", "content": user_msg}],
            temperature=temp,
            **kwargs,
        )
        content = (resp.choices[0].message.content or "").strip()
        log.debug("OpenAIChat.chat() received %d chars", len(content))
        return content
