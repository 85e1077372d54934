"""
FastAPI dependencies for settings and external capabilities.
Route tests override get_completion / get_speech with fakes.
"""
from config import Settings, settings
from services.capabilities import CompletionCapability, SpeechCapability, build_completion, build_speech


def get_settings() -> Settings:
    return settings


def get_completion() -> CompletionCapability:
    return build_completion(settings)


def get_speech() -> SpeechCapability:
    return build_speech(settings)
