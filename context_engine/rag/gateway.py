"""Language-model gateway used by the multi-pass strategy."""

import logging
from functools import partial
from typing import Protocol

import anyio
import dspy

from ..core.config import Settings
from ..schemas.messages import Message, ModelResponse

logger = logging.getLogger(__name__)


class ModelGateway(Protocol):
    """Sends role-tagged messages to a model and returns its reply with token usage."""

    async def complete(self, messages: list[Message]) -> ModelResponse: ...


def _total_tokens(usage) -> int:
    if not usage:
        return 0
    if isinstance(usage, dict):
        total = usage.get("total_tokens")
    else:
        total = getattr(usage, "total_tokens", None)
    try:
        return int(total or 0)
    except (TypeError, ValueError):
        return 0


class DSPyGateway:
    """
    ModelGateway backed by a `dspy.LM`.

    The LM is called in a worker thread. On cancellation or deadline the
    thread is abandoned and the call raises immediately. Transport and
    rate-limit errors raised by the LM propagate unchanged.
    """

    def __init__(self, lm: dspy.LM | None = None):
        self.lm = lm

    def _resolve_lm(self) -> dspy.LM:
        lm = self.lm or dspy.settings.lm
        if lm is None:
            raise ValueError("No language model configured; pass one to DSPyGateway or call dspy.configure(lm=...).")
        return lm

    async def complete(self, messages: list[Message]) -> ModelResponse:
        lm = self._resolve_lm()
        payload = [message.model_dump() for message in messages]

        # `forward` returns the raw provider response, which carries the usage block
        response = await anyio.to_thread.run_sync(partial(lm.forward, messages=payload), abandon_on_cancel=True)

        content = response.choices[0].message.content or ""
        tokens = _total_tokens(getattr(response, "usage", None))

        logger.debug(f"Model call returned {len(content)} chars, {tokens} tokens")
        return ModelResponse(content=content, token_usage=tokens)


def build_default_gateway(settings: Settings | None = None) -> DSPyGateway:
    """Gateway for the model named in settings."""
    settings = settings or Settings()
    lm = dspy.LM(settings.LLM_MODEL, temperature=settings.LLM_TEMPERATURE, max_tokens=settings.LLM_MAX_TOKENS)
    return DSPyGateway(lm)
