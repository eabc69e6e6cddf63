"""OpenAI-compatible analysis client.

The analysis is produced by one chat completion that returns a JSON object
with six sections, ``step1`` to ``step6``. Any OpenAI-compatible endpoint
works (OpenAI, DeepSeek, ...) by setting ``OPENAI_BASE_URL``.
"""
from __future__ import annotations

import json
import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Tuple

import openai
from openai import OpenAI

from pdf_analyzer.errors import AnalysisFailure

logger = logging.getLogger(__name__)

ANALYSIS_STEPS: Tuple[str, ...] = ("step1", "step2", "step3", "step4", "step5", "step6")

STEP_INSTRUCTIONS: Dict[str, str] = {
    "step1": "A short summary of the document.",
    "step2": "The main topics and the structure of the document.",
    "step3": "Key facts, figures and claims, as a bulleted list.",
    "step4": "Important terms and definitions used in the document.",
    "step5": "Weak points, open questions and inconsistencies.",
    "step6": "Final conclusions and recommendations for the reader.",
}

SYSTEM_PROMPT = (
    "You are a JSON API. Return ONLY valid JSON with no code fences and no "
    "explanations. Start your response with { and end with }."
)


def clamp_text(s: str, limit: int) -> str:
    return (s or "")[:limit]


def analysis_prompt(text: str) -> str:
    sections = "\n".join(f'- "{step}": {STEP_INSTRUCTIONS[step]}' for step in ANALYSIS_STEPS)
    return (
        "Analyze the document below. Reply with a JSON object with exactly these "
        "keys; each value is a markdown string written in the language of the document.\n"
        f"{sections}\n\n"
        "DOCUMENT:\n"
        f"{text}"
    )


_FENCE_RE = re.compile(r"^```[A-Za-z]*\s*|\s*```$")
_OBJECT_RE = re.compile(r"\{.*\}", flags=re.DOTALL)


def _decode_object(candidate: str) -> Optional[Dict[str, Any]]:
    try:
        obj = json.loads(candidate)
    except ValueError:
        return None
    return obj if isinstance(obj, dict) else None


def _step_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (list, dict)):
        return json.dumps(value, ensure_ascii=False, indent=2)
    return str(value)


def parse_analysis(content: str) -> Dict[str, str]:
    """Decode the model reply into a step1..step6 mapping of strings.

    Code fences are ignored and a JSON object embedded in prose is accepted.
    Missing steps come back empty; a reply carrying none of the steps fails.
    """
    body = _FENCE_RE.sub("", (content or "").strip())
    if not body:
        raise AnalysisFailure("Empty model output")

    obj = _decode_object(body)
    if obj is None:
        match = _OBJECT_RE.search(body)
        obj = _decode_object(match.group(0)) if match else None
    if obj is None:
        raise AnalysisFailure("Model did not return valid json")
    if not any(step in obj for step in ANALYSIS_STEPS):
        raise AnalysisFailure("Model reply contains none of the analysis steps")

    return {step: _step_text(obj.get(step)) for step in ANALYSIS_STEPS}


class BaseAnalyzer(ABC):
    """analyze(text) -> {step: text}; raises AnalysisFailure."""

    @abstractmethod
    def analyze(self, text: str) -> Dict[str, str]:
        ...


class OpenAIAnalyzer(BaseAnalyzer):
    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: Optional[str] = None,
        timeout_seconds: float = 120,
        max_chars: int = 120000,
        temperature: float = 0.3,
        client: Any = None,
    ):
        self.api_key = (api_key or "").strip()
        self.model = model
        self.base_url = base_url or None
        self.timeout_seconds = timeout_seconds
        self.max_chars = max_chars
        self.temperature = temperature
        self._client = client

    @classmethod
    def from_config(cls, config) -> "OpenAIAnalyzer":
        return cls(
            api_key=config.get("OPENAI_API_KEY", ""),
            model=config.get("OPENAI_MODEL", "gpt-4.1"),
            base_url=config.get("OPENAI_BASE_URL"),
            timeout_seconds=config.get("OPENAI_TIMEOUT_SECONDS", 120),
            max_chars=config.get("ANALYSIS_MAX_CHARS", 120000),
        )

    def client_ready(self) -> Tuple[bool, str]:
        if self._client is not None:
            return True, ""
        if not self.api_key:
            return False, "OPENAI_API_KEY is missing"
        return True, ""

    def get_client(self):
        if self._client is None:
            ok, msg = self.client_ready()
            if not ok:
                raise AnalysisFailure(msg)
            self._client = OpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                timeout=self.timeout_seconds,
            )
        return self._client

    def analyze(self, text: str) -> Dict[str, str]:
        if not text or not text.strip():
            raise AnalysisFailure("No text to analyze", status_code=400)

        client = self.get_client()
        prompt = analysis_prompt(clamp_text(text, self.max_chars))
        logger.info("Requesting analysis from %s (%d characters)", self.model, len(prompt))
        try:
            res = client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                temperature=self.temperature,
            )
        except openai.APIError as e:
            raise AnalysisFailure(f"LLM request failed: {type(e).__name__}: {e}") from e

        if not res.choices:
            raise AnalysisFailure("LLM returned no choices")
        return parse_analysis(res.choices[0].message.content or "")
