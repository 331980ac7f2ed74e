"""
Insight Service - optional AI summary of a set of entries.

The provider gets a read-only copy of the entries. Any failure (no key,
network error, malformed answer) means "no insight available": it is logged
and None is returned. The ledger never waits on or depends on this call.
"""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

import requests

from timeledger.domain.models import AIInsight, TimeEntry

logger = logging.getLogger(__name__)

GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

PROMPT = (
    "Analyze my time log and provide insights. Here are the entries: {entries}. "
    "Provide a summary of where my time went, 3 actionable suggestions to improve "
    "productivity or balance, and a productivity score from 0-100. "
    "Answer in {language}."
)

RESPONSE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "summary": {"type": "STRING"},
        "suggestions": {"type": "ARRAY", "items": {"type": "STRING"}},
        "productivityScore": {"type": "NUMBER"},
    },
    "required": ["summary", "suggestions", "productivityScore"],
}

LANGUAGE_NAMES = {"en": "English", "zh": "Simplified Chinese"}


class InsightProvider(ABC):
    """Something that turns entries into an insight"""

    @abstractmethod
    def generate(self, entries: List[TimeEntry]) -> AIInsight:
        """
        Raises:
            Exception: Any failure; the service treats it as "no insight"
        """


def parse_insight(data: dict) -> AIInsight:
    """Build an insight from the model's JSON answer, clamping the score to 0-100"""
    score = float(data.get("productivityScore", 0))
    return AIInsight(
        summary=str(data["summary"]),
        suggestions=[str(s) for s in data.get("suggestions", [])],
        productivity_score=min(100.0, max(0.0, score)),
    )


class GeminiInsightProvider(InsightProvider):
    """Gemini generateContent over plain HTTPS with a JSON response schema"""

    def __init__(self, api_key: str, model: str = "gemini-2.0-flash", timeout: int = 30,
                 language: str = "en", session: Optional[requests.Session] = None):
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.language = language
        self.session = session or requests.Session()

    def _payload(self, entries: List[TimeEntry]) -> dict:
        entries_json = json.dumps([e.model_dump(mode='json') for e in entries], ensure_ascii=False)
        prompt = PROMPT.format(entries=entries_json,
                               language=LANGUAGE_NAMES.get(self.language, "English"))
        return {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": RESPONSE_SCHEMA,
            },
        }

    def generate(self, entries: List[TimeEntry]) -> AIInsight:
        response = self.session.post(
            GEMINI_URL.format(model=self.model),
            params={"key": self.api_key},
            json=self._payload(entries),
            timeout=self.timeout,
        )
        response.raise_for_status()
        body = response.json()
        text = body["candidates"][0]["content"]["parts"][0]["text"]
        return parse_insight(json.loads(text or "{}"))


class InsightService:
    """
    Shields the ledger from the insight provider.
    """

    def __init__(self, provider: Optional[InsightProvider] = None):
        self.provider = provider

    @classmethod
    def from_preferences(cls, preferences, language: str = "en") -> 'InsightService':
        """Gemini provider when an API key is configured, otherwise no provider"""
        if not preferences.gemini_api_key:
            return cls(None)
        return cls(GeminiInsightProvider(
            api_key=preferences.gemini_api_key,
            model=preferences.gemini_model,
            timeout=preferences.insight_timeout_seconds,
            language=language,
        ))

    def generate(self, entries: Iterable[TimeEntry]) -> Optional[AIInsight]:
        """
        Returns:
            The insight, or None when unavailable for any reason
        """
        if self.provider is None:
            logger.info("No insight provider configured")
            return None

        snapshot = [e.model_copy(deep=True) for e in entries]
        try:
            return self.provider.generate(snapshot)
        except Exception as e:
            logger.warning(f"Insight generation failed: {e}")
            return None

    async def generate_async(self, entries: Iterable[TimeEntry]) -> Optional[AIInsight]:
        """Same as generate(), on a worker thread so the event loop stays free"""
        snapshot = [e.model_copy(deep=True) for e in entries]
        return await asyncio.to_thread(self.generate, snapshot)
