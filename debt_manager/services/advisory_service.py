import json
import logging
import os

import openai

from debt_manager.exceptions import UpstreamUnavailable
from debt_manager.schemas.transaction import TransactionIn


logger = logging.getLogger(__name__)

# Gemini exposes an OpenAI-compatible chat completions endpoint.
DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"
DEFAULT_MODEL = "gemini-2.5-flash"

NO_KEY_MESSAGE = "Análise de IA indisponível (Chave não configurada)."
UNAVAILABLE_MESSAGE = "Não foi possível gerar uma estratégia no momento."


def _field(obj, *names, default=None):
    for name in names:
        if isinstance(obj, dict):
            if name in obj:
                return obj[name]
        elif hasattr(obj, name):
            return getattr(obj, name)
    return default


def _history_item(tx) -> dict:
    # Plain dicts are accepted and validated into TransactionIn.
    return TransactionIn.model_validate(tx).model_dump(mode="json", exclude_none=True)


def build_prompt(customer, transactions: list[TransactionIn] | None = None) -> str:
    name = _field(customer, "name", default="")
    total_debt = _field(customer, "total_debt", "totalDebt", default=0)
    history = [_history_item(tx) for tx in (transactions or [])]

    return (
        "Analyze this customer's debt profile and suggest a recovery strategy.\n"
        f"Customer: {name}\n"
        f"Total Debt: R$ {total_debt}\n"
        f"History: {json.dumps(history, default=str)}\n"
    )


class DebtAdvisor:
    """Asks a text-generation service for a collection strategy.

    `get_debt_strategy` always returns text: the strategy, or a fallback
    message when the key is missing or the service fails.
    """

    def __init__(self, *, api_key: str | None = None, model: str | None = None, base_url: str | None = None, client=None):
        self.api_key = api_key
        self.model = model or DEFAULT_MODEL
        self.client = client
        if self.client is None and self.api_key:
            self.client = openai.AsyncOpenAI(api_key=self.api_key, base_url=base_url or DEFAULT_BASE_URL)

    @classmethod
    def from_env(cls) -> "DebtAdvisor":
        return cls(
            api_key=os.getenv("ADVISORY_API_KEY") or os.getenv("API_KEY"),
            model=os.getenv("ADVISORY_MODEL"),
            base_url=os.getenv("ADVISORY_BASE_URL"),
        )

    @property
    def configured(self) -> bool:
        return self.client is not None

    async def _generate(self, prompt: str) -> str:
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
            )
            text = response.choices[0].message.content
        except Exception as e:
            raise UpstreamUnavailable(str(e)) from e

        if not text or not text.strip():
            raise UpstreamUnavailable("empty completion")
        return text.strip()

    async def get_debt_strategy(self, customer, transactions: list[TransactionIn] | None = None) -> str:
        if not self.configured:
            return NO_KEY_MESSAGE

        customer_id = _field(customer, "id")
        try:
            prompt = build_prompt(customer, transactions)
            return await self._generate(prompt)
        except Exception:
            logger.exception("advisory request failed", extra={"customer_id": customer_id, "model": self.model})
            return UNAVAILABLE_MESSAGE
