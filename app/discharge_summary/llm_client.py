# app/discharge_summary/llm_client.py
"""
Discharge Summary LLM Client
Provider factory (OpenAI, Claude, Ollama) plus the prompt that turns a
de-identified care-day timeline into a discharge/transfer summary
"""
import logging
from typing import Any, Optional

from langchain_core.messages import HumanMessage, SystemMessage

from app.discharge_summary.schemas import DischargeSummaryInput
from app.system_services.exceptions import GenerationConfigurationError, GenerationFailureError
from config.summaryconfig import SummarySettings, summary_settings

logger = logging.getLogger(__name__)


SYSTEM_PROMPT = (
    "You are an ICU discharge-summary assistant. Produce concise, clinically useful summaries "
    "from de-identified inputs only. Do not invent data. Do not include names, MRN, DOB, or exact "
    "calendar dates. Refer only to care-day index (D1, D2, etc.)."
)

SUMMARY_SECTIONS = (
    "Clinical Course",
    "Key Interventions",
    "Response and Current Status",
    "Ongoing Concerns",
    "Follow-up Plan",
)


def build_user_prompt(payload: DischargeSummaryInput) -> str:
    lines = ["Generate a discharge/transfer summary with these exact section headings:"]
    lines += [f"{index}) {heading}" for index, heading in enumerate(SUMMARY_SECTIONS, start=1)]
    lines += [
        "",
        "Rules:",
        "- Keep it de-identified.",
        "- Use bullet points under each section.",
        "- Mention care-day progression where relevant.",
        "- If information is missing, say 'Not documented'.",
        "",
        "Structured patient timeline:",
        payload.model_dump_json(indent=2),
    ]
    return "\n".join(lines)


def get_summary_llm(config: Optional[SummarySettings] = None):
    """
    Get a LangChain chat model for the configured provider.

    Raises:
        GenerationConfigurationError: unknown provider, missing API key, or
            provider package not installed
    """
    config = config or summary_settings
    provider = config.LLM_PROVIDER

    if provider == "openai":
        if not config.OPENAI_API_KEY:
            raise GenerationConfigurationError("OPENAI_API_KEY is not configured.")
        try:
            from langchain_openai import ChatOpenAI
        except ImportError:
            raise GenerationConfigurationError("langchain-openai not installed. Run: pip install langchain-openai")
        llm = ChatOpenAI(
            model=config.OPENAI_LLM_MODEL,
            temperature=config.LLM_TEMPERATURE,
            max_tokens=config.MAX_TOKENS,
            api_key=config.OPENAI_API_KEY,
        )

    elif provider == "claude":
        if not config.CLAUDE_API_KEY:
            raise GenerationConfigurationError("CLAUDE_API_KEY is not configured.")
        try:
            from langchain_anthropic import ChatAnthropic
        except ImportError:
            raise GenerationConfigurationError("langchain-anthropic not installed. Run: pip install langchain-anthropic")
        llm = ChatAnthropic(
            model=config.CLAUDE_LLM_MODEL,
            temperature=config.LLM_TEMPERATURE,
            max_tokens=config.MAX_TOKENS,
            api_key=config.CLAUDE_API_KEY,
        )

    elif provider == "ollama":
        try:
            from langchain_ollama import ChatOllama
        except ImportError:
            raise GenerationConfigurationError("langchain-ollama not installed. Run: pip install langchain-ollama")
        llm = ChatOllama(
            model=config.OLLAMA_LLM_MODEL,
            temperature=config.LLM_TEMPERATURE,
        )

    else:
        raise GenerationConfigurationError(f"Unknown LLM provider: {provider}")

    logger.info(f"✅ Summary LLM initialized: {provider} - {config.current_llm_model}")
    return llm


def extract_output_text(content: Any) -> str:
    """AIMessage.content is a string, or a list of content blocks for some providers."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and isinstance(block.get("text"), str):
                parts.append(block["text"])
        return "".join(parts)
    return ""


class DischargeSummaryLLM:
    """One blocking round trip per summary; never retried here."""

    def __init__(self, chat_model=None, config: Optional[SummarySettings] = None):
        self._chat_model = chat_model
        self.config = config or summary_settings

    @property
    def chat_model(self):
        if self._chat_model is None:
            self._chat_model = get_summary_llm(self.config)
        return self._chat_model

    async def generate(self, payload: DischargeSummaryInput) -> str:
        chat_model = self.chat_model
        messages = [
            SystemMessage(content=SYSTEM_PROMPT),
            HumanMessage(content=build_user_prompt(payload)),
        ]

        logger.info(
            f"🤖 Requesting discharge summary for {payload.patient_id} "
            f"({len(payload.isbar_timeline)} ISBAR, {len(payload.daily_progress_timeline)} progress notes)"
        )
        try:
            response = await chat_model.ainvoke(messages)
        except Exception as e:
            logger.error(f"❌ Summary LLM request failed: {e}", exc_info=True)
            raise GenerationFailureError(f"LLM request failed: {e}")

        text = extract_output_text(getattr(response, "content", response))
        if not text.strip():
            raise GenerationFailureError("LLM response was empty.")
        return text
