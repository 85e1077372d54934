"""
External capabilities used by the pipelines: text completion and text-to-speech.

The core only depends on the two protocols below. Concrete adapters are built from
Settings at request time; a missing credential raises ConfigurationMissing inside the
adapter before any network call. Each generate()/synthesize() is exactly one provider
request: no retries and no provider fallback chain.
"""
from __future__ import annotations

from typing import Optional, Protocol

import httpx
import structlog

from config import Settings
from services.errors import CapabilityUnavailable, ConfigurationMissing, SpeechUnavailable

logger = structlog.get_logger(__name__)

ELEVENLABS_TTS_URL = "https://api.elevenlabs.io/v1/text-to-speech/{voice_id}/stream"
JSON_SYSTEM_PROMPT = "You extract structured data from documents. Respond only with valid JSON."


class CompletionCapability(Protocol):
    async def generate(self, prompt: str, *, json_output: bool = False) -> str:
        """Send one prompt and return the response text."""
        ...


class SpeechCapability(Protocol):
    async def synthesize(self, text: str) -> bytes:
        """Render plain text to audio bytes (audio/mpeg)."""
        ...


class GeminiCompletion:
    provider = "gemini"

    def __init__(self, api_key: Optional[str], model: str, timeout: Optional[float] = None) -> None:
        self.api_key = api_key
        self.model = model
        self.timeout = timeout

    async def generate(self, prompt: str, *, json_output: bool = False) -> str:
        if not self.api_key:
            raise ConfigurationMissing("GEMINI_API_KEY is not configured", env_var="GEMINI_API_KEY")
        import google.generativeai as genai

        try:
            genai.configure(api_key=self.api_key)
            model = genai.GenerativeModel(self.model)
            config = (
                genai.types.GenerationConfig(temperature=0.1, response_mime_type="application/json")
                if json_output
                else None
            )
            request_options = {"timeout": self.timeout} if self.timeout else None
            resp = await model.generate_content_async(
                prompt,
                generation_config=config,
                request_options=request_options,
            )
            text = resp.text
        except Exception as e:
            logger.warning("completion_failed", provider=self.provider, model=self.model, error=str(e))
            raise CapabilityUnavailable("Gemini completion failed", details=str(e)) from e
        return text or ""


class GroqCompletion:
    provider = "groq"

    def __init__(self, api_key: Optional[str], model: str, timeout: Optional[float] = None) -> None:
        self.api_key = api_key
        self.model = model
        self.timeout = timeout

    async def generate(self, prompt: str, *, json_output: bool = False) -> str:
        if not self.api_key:
            raise ConfigurationMissing("GROQ_API_KEY is not configured", env_var="GROQ_API_KEY")
        from groq import AsyncGroq

        messages = [{"role": "user", "content": prompt}]
        kwargs = {}
        if json_output:
            messages.insert(0, {"role": "system", "content": JSON_SYSTEM_PROMPT})
            kwargs = {"temperature": 0.1, "response_format": {"type": "json_object"}}
        try:
            async with AsyncGroq(api_key=self.api_key, timeout=self.timeout) as client:
                resp = await client.chat.completions.create(model=self.model, messages=messages, **kwargs)
            content = resp.choices[0].message.content
        except Exception as e:
            logger.warning("completion_failed", provider=self.provider, model=self.model, error=str(e))
            raise CapabilityUnavailable("Groq completion failed", details=str(e)) from e
        return content or ""


class ElevenLabsSpeech:
    def __init__(
        self,
        api_key: Optional[str],
        voice_id: str,
        model_id: str,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_key = api_key
        self.voice_id = voice_id
        self.model_id = model_id
        self.timeout = timeout
        self._transport = transport

    async def synthesize(self, text: str) -> bytes:
        if not self.api_key:
            raise ConfigurationMissing("ElevenLabs API key not configured.", env_var="ELEVENLABS_API_KEY")
        headers = {"Content-Type": "application/json", "xi-api-key": self.api_key}
        body = {
            "text": text,
            "model_id": self.model_id,
            "voice_settings": {"stability": 0.75, "similarity_boost": 0.75},
        }
        url = ELEVENLABS_TTS_URL.format(voice_id=self.voice_id)
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(url, headers=headers, json=body)
        except httpx.HTTPError as e:
            raise SpeechUnavailable("Failed to generate audio from ElevenLabs", details=str(e)) from e
        if response.is_error:
            raise SpeechUnavailable(
                "Failed to generate audio from ElevenLabs",
                details=f"HTTP {response.status_code}",
            )
        return response.content


def build_completion(settings: Settings) -> CompletionCapability:
    """Completion adapter for the configured provider. Does not check credentials."""
    if settings.completion_provider == "groq":
        return GroqCompletion(settings.groq_api_key, settings.groq_model, settings.completion_timeout_seconds)
    return GeminiCompletion(settings.gemini_api_key, settings.gemini_model, settings.completion_timeout_seconds)


def build_speech(settings: Settings) -> SpeechCapability:
    return ElevenLabsSpeech(
        settings.elevenlabs_api_key,
        voice_id=settings.elevenlabs_voice_id,
        model_id=settings.elevenlabs_model_id,
        timeout=settings.speech_timeout_seconds,
    )
