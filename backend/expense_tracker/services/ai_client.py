# expense_tracker/services/ai_client.py
"""Thin OpenAI wrapper for receipt extraction.

One non-streaming call per receipt; SDK retries are disabled so a failure
reaches the caller immediately as ReceiptServiceError.
"""
import logging
import time
from typing import Optional

from openai import APIConnectionError, APIStatusError, APITimeoutError, OpenAI, OpenAIError

from expense_tracker.core.config import settings
from expense_tracker.core.errors import ReceiptServiceError

logger = logging.getLogger(__name__)

VISION_USER_INSTRUCTION = (
    "Extract the information from this receipt according to the specified format. "
    "Always include a title and an amount, even if they have to be best guesses."
)


class ReceiptAIClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        max_tokens: Optional[int] = None,
        client: Optional[OpenAI] = None,
    ):
        self.model = model or settings.OPENAI_MODEL
        self.max_tokens = max_tokens or settings.OPENAI_MAX_TOKENS
        self._api_key = api_key or settings.OPENAI_API_KEY or None
        self._timeout = timeout or settings.OPENAI_TIMEOUT_SECONDS
        self._client = client

    @property
    def client(self) -> OpenAI:
        # built lazily: the SDK raises at construction when no API key is configured
        if self._client is None:
            self._client = OpenAI(api_key=self._api_key, timeout=self._timeout, max_retries=0)
        return self._client

    def complete_text(self, prompt: str) -> str:
        """Chat completion with the whole prompt as a single user message."""
        messages = [{"role": "user", "content": prompt}]
        return self._complete(messages, temperature=0, kind="text")

    def complete_vision(self, system_prompt: str, image_base64: str, mime_type: str = "image/jpeg") -> str:
        """Vision completion: system prompt plus the receipt image inline as a data URL."""
        messages = [
            {"role": "system", "content": system_prompt},
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": VISION_USER_INSTRUCTION},
                    {
                        "type": "image_url",
                        "image_url": {"url": f"data:{mime_type};base64,{image_base64}"},
                    },
                ],
            },
        ]
        return self._complete(messages, kind="vision")

    def _complete(self, messages, kind: str, temperature: Optional[float] = None) -> str:
        kwargs = {"model": self.model, "messages": messages, "max_tokens": self.max_tokens}
        if temperature is not None:
            kwargs["temperature"] = temperature

        t0 = time.perf_counter()
        try:
            completion = self.client.chat.completions.create(**kwargs)
        except (APIConnectionError, APITimeoutError) as exc:
            logger.error("network/timeout calling OpenAI (%s): %s", kind, exc)
            raise ReceiptServiceError("Receipt service is unavailable. Please try again later.") from exc
        except APIStatusError as exc:
            logger.error("OpenAI (%s) returned %s", kind, getattr(exc, "status_code", "?"))
            raise ReceiptServiceError("Receipt service returned an error. Please try again later.") from exc
        except OpenAIError as exc:
            logger.error("OpenAI (%s) call failed: %s", kind, exc)
            raise ReceiptServiceError("Receipt service is unavailable. Please try again later.") from exc

        choice = completion.choices[0] if completion.choices else None
        content = choice.message.content if choice is not None and choice.message is not None else None
        logger.info(
            "%s completion finished in %.2fs model=%s id=%s",
            kind, time.perf_counter() - t0, self.model, getattr(completion, "id", None),
        )
        return content or ""


def get_receipt_client() -> ReceiptAIClient:
    """FastAPI dependency; tests override it with a fake."""
    return ReceiptAIClient()
