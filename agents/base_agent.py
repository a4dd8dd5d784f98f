"""Base agent class that all generative stages inherit from.

Every agent:
- Builds a system prompt with the required JSON response shape
- Calls the LLM with a JSON payload, under a per-call timeout
- Parses and validates the output against its Pydantic contract
- Retries once with the validation error when the shape is wrong
- Tracks token usage and cost for the composition metadata
"""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from typing import Type, TypeVar, Optional, Any
from pydantic import BaseModel, ValidationError

from providers import get_provider, LLMProvider
from config import settings

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


class TokenUsage(BaseModel):
    """Track token usage for cost calculation."""
    input_tokens: int = 0
    output_tokens: int = 0
    reported_cost: float = 0.0

    @property
    def total_cost(self) -> float:
        """Provider-reported cost, or an estimate from configured token pricing."""
        if self.reported_cost:
            return self.reported_cost
        return settings.calculate_cost(self.input_tokens, self.output_tokens)

    def add(self, other: "TokenUsage") -> None:
        self.input_tokens += other.input_tokens
        self.output_tokens += other.output_tokens
        self.reported_cost += other.reported_cost


class AgentResult(BaseModel):
    """Result from an agent run, including output and metadata."""
    output: Any
    token_usage: TokenUsage
    model: str
    provider: str = "litellm"
    raw_response: Optional[str] = None
    retries: int = 0


def extract_json_text(response_text: str) -> str:
    """Strip markdown fences and surrounding prose from a JSON answer."""
    text = response_text.strip()

    if "```json" in text:
        start = text.find("```json") + 7
        end = text.find("```", start)
        text = text[start:end].strip()
    elif "```" in text:
        start = text.find("```") + 3
        end = text.find("```", start)
        text = text[start:end].strip()

    if not text.startswith(("{", "[")):
        start, end = text.find("{"), text.rfind("}")
        if start != -1 and end > start:
            text = text[start:end + 1]
    return text


class BaseAgent(ABC):
    """Base class for the selector, prop generator, and gap filler.

    Supports any LLMProvider; defaults to LiteLLM with the class DEFAULT_TIER.
    """

    DEFAULT_TIER: Optional[str] = None

    def __init__(
        self,
        role: str,
        system_prompt: str,
        output_schema: Optional[Type[T]],
        model: Optional[str] = None,
        provider: Optional[str] = None,
        llm_provider: Optional[LLMProvider] = None,
        timeout_seconds: Optional[float] = None,
    ):
        """Initialize the agent.

        Args:
            role: Stage name used in logs and call metadata (e.g. 'selector')
            system_prompt: The agent's system prompt defining its behavior
            output_schema: Pydantic model class for validating output (None: supplied per call)
            model: Override the default model or tier (e.g. 'gpt-4o-mini', 'quality')
            provider: Explicit provider name (litellm, anthropic, openai, deepseek, gemini)
            llm_provider: Ready provider instance (takes precedence over provider/model lookup)
            timeout_seconds: Per-call timeout (defaults to settings.api_timeout_seconds)
        """
        self.role = role
        self.system_prompt = system_prompt
        self.output_schema = output_schema
        self.timeout_seconds = timeout_seconds or settings.api_timeout_seconds

        tier = self.DEFAULT_TIER
        self.llm_provider: LLMProvider = llm_provider or get_provider(provider_name=provider, model=model or tier)
        self.model = model or tier or self.llm_provider.default_model
        if hasattr(self.llm_provider, "set_metadata"):
            self.llm_provider.set_metadata({"agent": self.role, "tier": tier or "?"})

        self.total_usage = TokenUsage()

    def _build_full_system_prompt(self, output_schema: Optional[Type[BaseModel]] = None) -> str:
        """Build the complete system prompt including the response schema."""
        schema = output_schema or self.output_schema
        if schema is None:
            raise ValueError(f"{self.role}: no output schema for this call")
        parts = [self.system_prompt]
        parts.append("\n\n# OUTPUT FORMAT\n")
        parts.append("You MUST respond with valid JSON matching this schema:\n\n")
        parts.append(f"```json\n{json.dumps(schema.model_json_schema(), indent=2)}\n```")
        return "".join(parts)

    def _parse_and_validate(self, response_text: str, output_schema: Optional[Type[BaseModel]] = None) -> Any:
        """Parse LLM response and validate against schema.

        Raises:
            ValidationError: If response doesn't match schema
            json.JSONDecodeError: If response isn't valid JSON
        """
        data = json.loads(extract_json_text(response_text))
        return (output_schema or self.output_schema).model_validate(data)

    async def run(
        self,
        input_data: BaseModel,
        max_retries: Optional[int] = None,
        model: Optional[str] = None,
        output_schema: Optional[Type[BaseModel]] = None,
    ) -> AgentResult:
        """Execute the agent.

        Args:
            input_data: Input data as a Pydantic model
            max_retries: Number of retries on validation failure (defaults to settings)
            model: Optional model override for this call
            output_schema: Per-call response contract (defaults to the agent's schema)

        Returns:
            AgentResult with validated output and metadata

        Raises:
            ValidationError: If output validation fails after retries
            json.JSONDecodeError: If output is not JSON after retries
            asyncio.TimeoutError: If the provider does not answer in time
            Exception: If the LLM call fails
        """
        if max_retries is None:
            max_retries = settings.api_max_retries
        full_system_prompt = self._build_full_system_prompt(output_schema)
        payload = input_data.model_dump_json(indent=2, exclude_none=True)
        user_message = f"# INPUT\n\n{payload}"

        last_error = None
        retries = 0

        for attempt in range(max_retries + 1):
            try:
                if attempt > 0 and last_error:
                    user_message = (
                        f"# INPUT\n\n{payload}\n\n"
                        f"# PREVIOUS ERROR\n\n"
                        f"Your previous response did not match the required schema. "
                        f"Error: {last_error}\n\n"
                        f"Please fix the issues and provide a valid JSON response."
                    )
                    retries = attempt

                response = await asyncio.wait_for(
                    self.llm_provider.acomplete(
                        system_prompt=full_system_prompt,
                        user_message=user_message,
                        model=model or self.model,
                        max_tokens=settings.max_tokens_per_agent_call,
                        json_mode=True,
                    ),
                    timeout=self.timeout_seconds,
                )

                usage = TokenUsage(
                    input_tokens=response.input_tokens,
                    output_tokens=response.output_tokens,
                    reported_cost=response.cost,
                )
                self.total_usage.add(usage)

                output = self._parse_and_validate(response.content, output_schema)

                return AgentResult(
                    output=output,
                    token_usage=usage,
                    model=response.model,
                    provider=response.provider,
                    raw_response=response.content,
                    retries=retries,
                )

            except (json.JSONDecodeError, ValidationError) as e:
                last_error = str(e)
                logger.debug("[%s] Response rejected (attempt %d): %s", self.role, attempt + 1, last_error)
                if attempt == max_retries:
                    raise

        # Should not reach here
        raise RuntimeError("Unexpected error in agent run loop")

    @abstractmethod
    def get_task_description(self) -> str:
        """Return a description of what this agent does.

        Used for logging and debugging.
        """
        pass
