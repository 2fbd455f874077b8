# cerebro/llm/client.py
from __future__ import annotations
import logging
from typing import Any, List, Optional, Sequence, Tuple

from langchain_core.messages import HumanMessage
from langchain_core.runnables import Runnable

from config import settings
from cerebro.errors import NoAvailableModelsError, ProviderError

logger = logging.getLogger(__name__)


def status_code_of(exc: BaseException) -> Optional[int]:
    """HTTP status carried by a provider SDK error, if any."""
    # openai errors carry status_code, google-api-core errors carry code
    for status in (
        getattr(exc, "status_code", None),
        getattr(getattr(exc, "response", None), "status_code", None),
        getattr(exc, "code", None),
    ):
        if isinstance(status, int) and not isinstance(status, bool):
            return status
    return None


def message_text(content: Any) -> str:
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and isinstance(part.get("text"), str):
                parts.append(part["text"])
        return "".join(parts)
    return str(content)


class LLMClient:
    """
    Treats a provider as prompt -> text.

    `models` is an ordered list of (name, chat model). A call that fails with a
    retryable status (400/404/422: model unavailable) moves on to the next
    model; any other failure is raised right away.
    """

    def __init__(
        self,
        models: Sequence[Tuple[str, Runnable]],
        provider: str = "custom",
        stream: bool = False,
        retryable_status: Sequence[int] = tuple(settings.RETRYABLE_STATUS_CODES),
    ):
        self.models = list(models)
        self.provider = provider
        self.stream = stream
        self.retryable_status = set(retryable_status)

    def generate(self, prompt: str) -> str:
        messages = [HumanMessage(content=prompt)]
        last_error: Optional[BaseException] = None
        for name, model in self.models:
            try:
                text = self._call(model, messages)
            except Exception as e:
                status = status_code_of(e)
                if status in self.retryable_status:
                    logger.warning("%s model %s unavailable (%s), trying next", self.provider, name, status)
                    last_error = e
                    continue
                detail = f"{status} {e}" if status else str(e)
                raise ProviderError(f"{self.provider} generate failed: {detail}", status) from e
            return text.strip()
        raise NoAvailableModelsError(f"{self.provider} generate failed: no available models") from last_error

    def _call(self, model: Runnable, messages: List[Any]) -> str:
        if self.stream:
            # reassemble streamed deltas into one reply
            return "".join(message_text(getattr(chunk, "content", chunk)) for chunk in model.stream(messages))
        resp = model.invoke(messages)
        return message_text(getattr(resp, "content", resp))


# ---------- provider factory ----------
def resolve_tamu_url(base_url: str) -> str:
    base = base_url.rstrip("/")
    return base if base.endswith("/api") else f"{base}/api"


def _sampling_kwargs() -> dict:
    kwargs: dict = {}
    if settings.LLM_TEMPERATURE is not None:
        kwargs["temperature"] = settings.LLM_TEMPERATURE
    if settings.LLM_TOP_P is not None:
        kwargs["top_p"] = settings.LLM_TOP_P
    return kwargs


def _max_tokens() -> Optional[int]:
    return int(settings.LLM_MAX_TOKENS) if settings.LLM_MAX_TOKENS is not None else None


def build_llm_client(provider: Optional[str] = None) -> LLMClient:
    provider = (provider or settings.LLM_PROVIDER).strip().lower()

    if provider == "tamu":
        from langchain_openai import ChatOpenAI

        if not settings.TAMU_API_KEY:
            raise ProviderError("TAMU_API_KEY not configured")
        extra = _sampling_kwargs()
        if _max_tokens() is not None:
            extra["max_tokens"] = _max_tokens()
        models = [
            (
                name,
                ChatOpenAI(
                    model=name,
                    api_key=settings.TAMU_API_KEY,
                    base_url=resolve_tamu_url(settings.TAMU_BASE_URL),
                    max_retries=0,
                    **extra,
                ),
            )
            for name in settings.TAMU_CHAT_MODELS
        ]
        return LLMClient(models, provider=provider, stream=settings.LLM_STREAM)

    if provider == "gemini":
        from langchain_google_genai import ChatGoogleGenerativeAI

        if not settings.GEMINI_API_KEY:
            raise ProviderError("GEMINI_API_KEY not configured")
        extra = _sampling_kwargs()
        if _max_tokens() is not None:
            extra["max_output_tokens"] = _max_tokens()
        model = ChatGoogleGenerativeAI(
            model=settings.GEMINI_CHAT_MODEL,
            google_api_key=settings.GEMINI_API_KEY,
            max_retries=0,
            **extra,
        )
        return LLMClient([(settings.GEMINI_CHAT_MODEL, model)], provider=provider, stream=settings.LLM_STREAM)

    if provider == "ollama":
        from langchain_ollama import ChatOllama

        extra = _sampling_kwargs()
        if _max_tokens() is not None:
            extra["num_predict"] = _max_tokens()
        model = ChatOllama(model=settings.OLLAMA_MODEL, base_url=settings.OLLAMA_URL, **extra)
        return LLMClient([(settings.OLLAMA_MODEL, model)], provider=provider, stream=settings.LLM_STREAM)

    raise ProviderError(f"Unknown LLM_PROVIDER '{provider}' (expected tamu, gemini or ollama)")


def build_embeddings(provider: Optional[str] = None):
    provider = (provider or settings.EMBEDDING_PROVIDER).strip().lower()
    if provider == "ollama":
        from langchain_ollama import OllamaEmbeddings

        return OllamaEmbeddings(model=settings.OLLAMA_EMBED_MODEL, base_url=settings.OLLAMA_URL)
    if provider == "openai":
        from langchain_openai import OpenAIEmbeddings

        return OpenAIEmbeddings(model=settings.EMBEDDING_MODEL, api_key=settings.OPENAI_API_KEY or None)
    raise ProviderError(f"Unknown EMBEDDING_PROVIDER '{provider}' (expected openai or ollama)")
