# config/draftconfig.py
"""
Draft Generation Configuration
Controls which LLM drafts prescriptions and how long a draft may take
Supports: Mock (offline), Ollama, OpenAI, Claude, Groq, Gemini
"""
from typing import List, Literal

from pydantic_settings import BaseSettings


class DraftSettings(BaseSettings):
    """Configuration for the prescription Draft Generation Gateway"""

    # ============================================================================
    # LLM SELECTION (for drafting prescriptions)
    # ============================================================================
    LLM_PROVIDER: Literal["mock", "ollama", "openai", "claude", "groq", "gemini"] = "mock"

    # ── Ollama Settings (Local, Free) ──
    OLLAMA_CANDIDATE_MODELS: List[str] = ["llama3.1:8b"]
    # Alternatives: "llama3:8b", "mixtral:8x7b"

    # ── OpenAI Settings (Cloud, Paid) ──
    OPENAI_API_KEY: str = ""
    OPENAI_CANDIDATE_MODELS: List[str] = ["gpt-4o-mini", "gpt-3.5-turbo"]

    # ── Claude Settings (Cloud, Paid) ──
    CLAUDE_API_KEY: str = ""
    CLAUDE_CANDIDATE_MODELS: List[str] = ["claude-3-5-sonnet-20241022", "claude-3-haiku-20240307"]

    # ── Groq Settings (Cloud, Free tier) ──
    GROQ_API_KEY: str = ""
    GROQ_CANDIDATE_MODELS: List[str] = ["llama-3.3-70b-versatile"]

    # ── Gemini Settings (Google Cloud) ──
    # Tried in order; the first model that answers wins
    GEMINI_API_KEY: str = ""
    GEMINI_CANDIDATE_MODELS: List[str] = [
        "gemini-2.0-flash-exp",
        "gemini-2.0-flash",
        "gemini-1.5-flash",
    ]

    # ============================================================================
    # GENERATION SETTINGS
    # ============================================================================
    LLM_TEMPERATURE: float = 0.7
    MAX_TOKENS: int = 1000
    DRAFT_TIMEOUT_SECONDS: float = 30.0

    # Raw text kept in `advice` when the model answers with non-JSON text
    FALLBACK_ADVICE_CHARS: int = 500

    class Config:
        env_file = ".env"
        extra = "ignore"

    # ========================================================================
    # COMPUTED PROPERTIES
    # ========================================================================
    @property
    def candidate_models(self) -> List[str]:
        """Ordered model names for the active provider."""
        provider_map = {
            "mock": ["keyword-mock"],
            "ollama": self.OLLAMA_CANDIDATE_MODELS,
            "openai": self.OPENAI_CANDIDATE_MODELS,
            "claude": self.CLAUDE_CANDIDATE_MODELS,
            "groq": self.GROQ_CANDIDATE_MODELS,
            "gemini": self.GEMINI_CANDIDATE_MODELS,
        }
        return list(provider_map[self.LLM_PROVIDER])

    @property
    def api_key(self) -> str:
        """API key for the active provider (empty for local providers)."""
        key_map = {
            "openai": self.OPENAI_API_KEY,
            "claude": self.CLAUDE_API_KEY,
            "groq": self.GROQ_API_KEY,
            "gemini": self.GEMINI_API_KEY,
        }
        return key_map.get(self.LLM_PROVIDER, "")
