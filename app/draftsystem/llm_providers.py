# app/draftsystem/llm_providers.py
"""
LLM Provider Factory for prescription drafting
Mock: offline keyword model
Ollama: local inference
OpenAI / Claude / Groq / Gemini: hosted chat models
"""
import logging

from langchain_core.language_models.chat_models import BaseChatModel

from config.draftconfig import DraftSettings

logger = logging.getLogger(__name__)


def _require_key(provider: str, api_key: str) -> str:
    if not api_key:
        raise ValueError(f"{provider.upper()}_API_KEY not set in environment")
    return api_key


def get_chat_model(provider: str, model: str, draft_settings: DraftSettings) -> BaseChatModel:
    """
    Build a LangChain chat model for one candidate model name.

    Args:
        provider: One of DraftSettings.LLM_PROVIDER
        model: Model identifier for that provider
        draft_settings: Settings carrying keys, temperature and token limits

    Returns:
        LangChain chat model instance
    """
    if provider == "mock":
        from app.draftsystem.mock_chat_model import KeywordMockChatModel

        return KeywordMockChatModel(model_name=model)

    elif provider == "ollama":
        from langchain_ollama import ChatOllama

        return ChatOllama(
            model=model,
            temperature=draft_settings.LLM_TEMPERATURE,
            num_predict=draft_settings.MAX_TOKENS,
            format="json",
        )

    elif provider == "openai":
        from langchain_openai import ChatOpenAI

        return ChatOpenAI(
            model=model,
            temperature=draft_settings.LLM_TEMPERATURE,
            max_tokens=draft_settings.MAX_TOKENS,
            api_key=_require_key(provider, draft_settings.OPENAI_API_KEY),
            max_retries=0,
            model_kwargs={"response_format": {"type": "json_object"}},
        )

    elif provider == "claude":
        from langchain_anthropic import ChatAnthropic

        return ChatAnthropic(
            model=model,
            temperature=draft_settings.LLM_TEMPERATURE,
            max_tokens=draft_settings.MAX_TOKENS,
            api_key=_require_key(provider, draft_settings.CLAUDE_API_KEY),
            max_retries=0,
        )

    elif provider == "groq":
        from langchain_groq import ChatGroq

        return ChatGroq(
            model=model,
            temperature=draft_settings.LLM_TEMPERATURE,
            max_tokens=draft_settings.MAX_TOKENS,
            groq_api_key=_require_key(provider, draft_settings.GROQ_API_KEY),
            max_retries=0,
        )

    elif provider == "gemini":
        from langchain_google_genai import ChatGoogleGenerativeAI

        return ChatGoogleGenerativeAI(
            model=model,
            temperature=draft_settings.LLM_TEMPERATURE,
            max_output_tokens=draft_settings.MAX_TOKENS,
            google_api_key=_require_key(provider, draft_settings.GEMINI_API_KEY),
            max_retries=0,
        )

    else:
        raise ValueError(f"Unknown LLM provider: {provider}")
