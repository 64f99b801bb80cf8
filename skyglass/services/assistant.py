"""Weather chat assistant backed by an OpenAI compatible completion endpoint."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, List, Optional

import requests
from requests import RequestException

from ..entities import WeatherSnapshot


logger = logging.getLogger(__name__)

GROQ_URL = "https://api.groq.com/openai/v1/chat/completions"
DEFAULT_MODEL = "llama-3.3-70b-versatile"
EMPTY_REPLY = "I couldn't generate a response."
FALLBACK_REPLY = "Sorry, I'm having trouble connecting to the weather network right now."
FORECAST_CONTEXT_ENTRIES = 8

PERSONA = """You are Umbrella Man, a calm, friendly and witty weather assistant living inside a weather website.

Scope:
- Answer questions about the current weather and the short-term forecast (at most 5 days).
- You do not fetch data or browse; the weather data is injected below.
- Reason only with the provided data. Never invent conditions, and say so when data is missing.
- Be conservative about AQI, heat, rain, wind and storms; humour must never hide safety information.
- Nothing you say is official, medical or authoritative advice.

Flow:
- If no city is available in the context, briefly ask the user to pick one and do not answer the weather question.
- If a city is available, answer from the data and do not ask for the city again.

Style: open with a short weather joke, then the facts, then a closing tip."""


class ServiceUnavailable(RuntimeError):
    """The assistant is not configured or the upstream call failed."""


class NotAuthenticated(PermissionError):
    """Chat is only available to signed-in users."""


def build_system_prompt(snapshot: Optional[WeatherSnapshot]) -> str:
    if snapshot is None:
        return (
            f"{PERSONA}\n\n[INSTRUCTION]: No weather data is available in the context. "
            "Politely ask the user to provide or select a city first."
        )

    lines = [
        PERSONA,
        "",
        "=== CURRENT CONTEXT ===",
        f"Location: {snapshot.location_name or 'Unknown Location'}",
        (
            f"Current Condition: {snapshot.condition_description}, Temp: {snapshot.temp_c}C, "
            f"Humidity: {snapshot.humidity_pct}%, Wind: {snapshot.wind_speed_ms}m/s"
        ),
    ]
    if snapshot.aqi:
        lines.append(f"AQI Level: {snapshot.aqi} (1=Good, 5=Poor)")
    if snapshot.forecast:
        lines.append("Forecast Summary (next few entries):")
        for point in snapshot.forecast[:FORECAST_CONTEXT_ENTRIES]:
            when = point.timestamp.strftime("%Y-%m-%d %H:%M:%S")
            lines.append(f"- {when}: {point.condition_main} ({point.temp_c}C)")
    lines.extend(["", "[INSTRUCTION]: Answer based on the data above."])
    return "\n".join(lines)


class AssistantService:
    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        url: str = GROQ_URL,
        session: Optional[requests.Session] = None,
        timeout: float = 15.0,
    ) -> None:
        self.api_key = api_key if api_key is not None else os.getenv("GROQ_API_KEY")
        self.model = model or os.getenv("GROQ_MODEL") or DEFAULT_MODEL
        self.url = url
        self.session = session or requests.Session()
        self.timeout = timeout
        if not self.api_key:
            logger.warning("GROQ_API_KEY is missing. Chat functionality will be disabled.")

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def ask(self, message: str, snapshot: Optional[WeatherSnapshot] = None) -> str:
        if not self.configured:
            raise ServiceUnavailable("Chat service unavailable. Please set GROQ_API_KEY in server environment.")
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": build_system_prompt(snapshot)},
                {"role": "user", "content": message},
            ],
        }
        headers = {"Authorization": f"Bearer {self.api_key}", "Content-Type": "application/json"}
        try:
            response = self.session.post(self.url, headers=headers, json=payload, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except (RequestException, ValueError) as exc:
            logger.error("Assistant request failed: %s", exc)
            raise ServiceUnavailable("Failed to fetch response from AI") from exc
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            logger.warning("Unexpected completion structure: %s", data)
            return EMPTY_REPLY
        return (content or "").strip() or EMPTY_REPLY


@dataclass(frozen=True)
class ChatMessage:
    role: str
    content: str


class ChatAssistant:
    """Chat transcript for the dashboard; the caller must be signed in."""

    def __init__(self, assistant: Any, auth: Any) -> None:
        self._assistant = assistant
        self._auth = auth
        self.messages: List[ChatMessage] = []

    def send(self, message: str, snapshot: Optional[WeatherSnapshot] = None) -> str:
        if not self._auth.is_authenticated:
            raise NotAuthenticated("sign in to chat with the assistant")
        text = (message or "").strip()
        if not text:
            raise ValueError("message is required")
        self.messages.append(ChatMessage(role="user", content=text))
        try:
            reply = self._assistant.ask(text, snapshot)
        except ServiceUnavailable as exc:
            logger.warning("Assistant unavailable: %s", exc)
            reply = FALLBACK_REPLY
        self.messages.append(ChatMessage(role="assistant", content=reply))
        return reply


__all__ = [
    "AssistantService",
    "ChatAssistant",
    "ChatMessage",
    "FALLBACK_REPLY",
    "NotAuthenticated",
    "ServiceUnavailable",
    "build_system_prompt",
]
