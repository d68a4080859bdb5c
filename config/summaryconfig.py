# config/summaryconfig.py
"""
Discharge Summary Configuration
Controls which LLM writes the de-identified discharge/transfer summary
Supports: OpenAI, Claude, Ollama
"""
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings


class SummarySettings(BaseSettings):
    """Configuration for discharge summary generation"""

    # ============================================================================
    # LLM SELECTION
    # ============================================================================
    LLM_PROVIDER: Literal["openai", "claude", "ollama"] = "openai"

    # ── OpenAI Settings (Cloud, Paid) ──
    OPENAI_API_KEY: str = Field(default="", env="OPENAI_API_KEY")
    OPENAI_LLM_MODEL: str = "gpt-4.1-mini"
    # Alternatives: "gpt-4o", "gpt-4o-mini"

    # ── Claude Settings (Cloud, Paid) ──
    CLAUDE_API_KEY: str = Field(default="", env="CLAUDE_API_KEY")
    CLAUDE_LLM_MODEL: str = "claude-3-5-sonnet-20241022"

    # ── Ollama Settings (Local, Free) ──
    OLLAMA_LLM_MODEL: str = "llama3.1:8b"

    # ============================================================================
    # GENERATION SETTINGS
    # ============================================================================
    LLM_TEMPERATURE: float = 0.2
    MAX_TOKENS: int = 1500

    # ============================================================================
    # POST-GENERATION REDACTION
    # ============================================================================
    REDACTION_MARKER: str = "[redacted]"

    class Config:
        env_file = ".env"
        extra = "ignore"

    @property
    def current_llm_model(self) -> str:
        """Get active LLM model based on provider."""
        provider_map = {
            "openai": self.OPENAI_LLM_MODEL,
            "claude": self.CLAUDE_LLM_MODEL,
            "ollama": self.OLLAMA_LLM_MODEL,
        }
        return provider_map.get(self.LLM_PROVIDER, self.OPENAI_LLM_MODEL)


summary_settings = SummarySettings()
