from __future__ import annotations

import logging
from typing import Any, Optional

import google.generativeai as genai
from google.generativeai.types import HarmBlockThreshold, HarmCategory

from common.config import SummarizerSettings
from summarizer_service.prompts import SUMMARY_PROMPT, build_summary_prompt

logger = logging.getLogger(__name__)

NOT_INITIALIZED = "Summarizer: Gemini model not initialized (check API key/model name)."
NO_TEXT = "Summarizer: No text provided to summarize."
BLOCKED_PREFIX = "Summary generation blocked: "
NO_CONTENT = "Summary generation failed: Could not extract text from response."
ERROR_PREFIX = "Error generating summary: "

DIAGNOSTIC_PREFIXES = (
    NOT_INITIALIZED,
    NO_TEXT,
    BLOCKED_PREFIX,
    NO_CONTENT,
    ERROR_PREFIX,
)

SAFETY_SETTINGS = {
    HarmCategory.HARM_CATEGORY_HARASSMENT: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
    HarmCategory.HARM_CATEGORY_HATE_SPEECH: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
    HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
    HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
}


def is_diagnostic(summary: Optional[str]) -> bool:
    """True when ``summary`` is one of the placeholder strings, not model output."""
    return not summary or summary.startswith(DIAGNOSTIC_PREFIXES)


def build_model(settings: SummarizerSettings) -> Optional[Any]:
    if not settings.is_configured:
        logger.warning("GEMINI_API_KEY not found. Summarization will be skipped.")
        return None
    try:
        genai.configure(api_key=settings.api_key)
        return genai.GenerativeModel(settings.model_name)
    except Exception:
        logger.exception("Failed to initialize Gemini client")
        return None


def _block_reason(response: Any) -> Optional[str]:
    feedback = getattr(response, "prompt_feedback", None)
    reason = getattr(feedback, "block_reason", None)
    if not reason:
        return None
    return getattr(reason, "name", None) or str(reason)


def _candidate_text(response: Any) -> Optional[str]:
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return None
    content = getattr(candidates[0], "content", None)
    parts = getattr(content, "parts", None) or []
    if not parts:
        return None
    text = getattr(parts[0], "text", None)
    return text if isinstance(text, str) else None


def _accessor_text(response: Any) -> Optional[str]:
    try:
        text = response.text
        if callable(text):
            text = text()
    except (AttributeError, ValueError):
        # the SDK raises ValueError when the response carries no parts
        return None
    return text if isinstance(text, str) and text else None


class GeminiSummarizer:
    """Turns transcript text into a summary string.

    ``summarize`` never raises: every failure comes back as one of the
    diagnostic strings above so the transcript is still delivered.
    """

    def __init__(self, settings: SummarizerSettings, model: Optional[Any] = None) -> None:
        self.settings = settings
        self._model = model

    @classmethod
    def from_settings(cls, settings: SummarizerSettings) -> "GeminiSummarizer":
        return cls(settings, model=build_model(settings))

    @property
    def configured(self) -> bool:
        return self._model is not None

    def generation_config(self) -> dict[str, Any]:
        return {
            "temperature": self.settings.temperature,
            "top_k": self.settings.top_k,
            "top_p": self.settings.top_p,
            "max_output_tokens": self.settings.max_output_tokens,
        }

    async def summarize(self, text: str, template: str = SUMMARY_PROMPT) -> str:
        if self._model is None:
            return NOT_INITIALIZED
        if not text or not text.strip():
            return NO_TEXT

        prompt = build_summary_prompt(text, template)
        logger.info("Sending text to Gemini for summarization (length=%d)", len(text))
        try:
            response = await self._model.generate_content_async(
                [{"role": "user", "parts": [{"text": prompt}]}],
                generation_config=self.generation_config(),
                safety_settings=SAFETY_SETTINGS,
            )
        except Exception as exc:
            logger.exception("Error calling Gemini API")
            return f"{ERROR_PREFIX}{str(exc) or 'Unknown error'}"

        reason = _block_reason(response)
        if reason:
            logger.error("Gemini prompt was blocked: %s", reason)
            return f"{BLOCKED_PREFIX}{reason}"

        summary = _candidate_text(response) or _accessor_text(response)
        if summary:
            return summary

        logger.error("No content or unexpected structure in Gemini response")
        return NO_CONTENT
