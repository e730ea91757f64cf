"""Natural-language weekly report via the Gemini text-generation API.

The client does no computation on issue data: it receives an already
aggregated statistics dict and returns the model's narrative text.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Any

import google.generativeai as genai

from .config import NARRATION_MODEL_NAME
from .errors import NarrationError
from .models import UserContext

logger = logging.getLogger(__name__)

PROMPT_TEMPLATE = """
You are writing a weekly operations report for a residential campus issue management system.

CRITICAL RULES:
- Use ONLY the numbers provided in the JSON.
- Do NOT invent or estimate any numbers.
- Do NOT add new metrics.

Write:
1) Key Insights (3 bullets)
2) Hotspots explanation (short)
3) SLA improvement plan (3 bullets)
4) Action Recommendations (3 bullets)

Stats JSON:
{stats_json}
"""


def build_prompt(stats: dict[str, Any]) -> str:
    return PROMPT_TEMPLATE.format(stats_json=json.dumps(stats, default=str))


def _default_model_factory(api_key: str, model_name: str):
    genai.configure(api_key=api_key)
    return genai.GenerativeModel(model_name)


class NarrationClient:
    """Callable report function: ``{stats}`` in, narration text out.

    Parameters
    ----------
    api_key : str | None
        Gemini credential. A missing key fails each call with
        ``failed-precondition`` rather than at construction.
    model_name : str
        Generative model to use.
    model_factory : callable, optional
        ``(api_key, model_name) -> model`` where ``model.generate_content``
        returns an object with a ``text`` attribute.
    """

    def __init__(
        self,
        api_key: str | None,
        model_name: str = NARRATION_MODEL_NAME,
        model_factory: Callable[[str, str], Any] | None = None,
    ):
        self.api_key = api_key
        self.model_name = model_name
        self._model_factory = model_factory or _default_model_factory

    def generate(self, stats: dict[str, Any] | None, user: UserContext | None) -> str:
        if user is None:
            raise NarrationError("unauthenticated", "Login required")
        if not stats:
            raise NarrationError("invalid-argument", "stats missing")
        if not self.api_key:
            raise NarrationError("failed-precondition", "Gemini API key secret missing")
        try:
            model = self._model_factory(self.api_key, self.model_name)
            response = model.generate_content(build_prompt(stats))
            return response.text
        except NarrationError:
            raise
        except Exception as exc:
            logger.error("AI narration failed: %s", exc)
            raise NarrationError("internal", str(exc) or "Unknown backend error") from exc
