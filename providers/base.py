"""Provider interface the generative stages talk to."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass
class LLMResponse:
    """One completion, normalized across providers."""
    content: str
    input_tokens: int
    output_tokens: int
    model: str
    provider: str
    cost: float = 0.0


class LLMProvider(ABC):
    """A chat model reachable with a system prompt and one user message.

    Composition stages always ask for a JSON object; providers that can
    enforce that natively do so when ``json_mode`` is set.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @property
    @abstractmethod
    def default_model(self) -> str:
        ...

    @abstractmethod
    def complete(
        self,
        system_prompt: str,
        user_message: str,
        model: Optional[str] = None,
        max_tokens: int = 4096,
        json_mode: bool = False,
    ) -> LLMResponse:
        """Blocking completion for synchronous callers; the composition pipeline awaits acomplete()."""

    @abstractmethod
    async def acomplete(
        self,
        system_prompt: str,
        user_message: str,
        model: Optional[str] = None,
        max_tokens: int = 4096,
        json_mode: bool = False,
    ) -> LLMResponse:
        """Completion awaited by the selector, prop generator and gap filler.

        Args:
            system_prompt: Stage instructions plus the response schema
            user_message: The stage input as a JSON document
            model: Model or tier alias; the provider default when omitted
            max_tokens: Ceiling on the answer length
            json_mode: Ask the service for a bare JSON object
        """

    def is_available(self) -> bool:
        return True
