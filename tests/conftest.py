"""Shared fixtures: scripted providers and a small request."""

import asyncio
import json
from typing import Any, Callable, List, Optional, Union

import pytest

from contracts import (
    ComposerOptions,
    CompositionRequest,
    ImageModelTier,
    ImageStyle,
    PageRequest,
    SizeClass,
    VisionDocument,
)
from patterns import get_registry
from providers.base import LLMProvider, LLMResponse
from providers.image_provider import ImageProvider, ImageResult


Scripted = Union[str, dict, Exception, Callable[[str, str], Any]]


class FakeLLMProvider(LLMProvider):
    """Returns scripted answers in order; the last one repeats."""

    def __init__(self, *responses: Scripted):
        self.responses: List[Scripted] = list(responses)
        self.calls: List[dict] = []

    @property
    def name(self) -> str:
        return "fake"

    @property
    def default_model(self) -> str:
        return "fake-model"

    def _next(self, system_prompt: str, user_message: str) -> str:
        if not self.responses:
            raise RuntimeError("no scripted response")
        index = min(len(self.calls) - 1, len(self.responses) - 1)
        answer = self.responses[index]
        if callable(answer) and not isinstance(answer, Exception):
            answer = answer(system_prompt, user_message)
        if isinstance(answer, Exception):
            raise answer
        if isinstance(answer, dict):
            answer = json.dumps(answer)
        return answer

    def complete(self, system_prompt, user_message, model=None, max_tokens=4096, json_mode=False) -> LLMResponse:
        self.calls.append({"system": system_prompt, "user": user_message, "model": model, "json_mode": json_mode})
        content = self._next(system_prompt, user_message)
        return LLMResponse(content=content, input_tokens=100, output_tokens=50, model="fake-model", provider="fake")

    async def acomplete(self, system_prompt, user_message, model=None, max_tokens=4096, json_mode=False) -> LLMResponse:
        return self.complete(system_prompt, user_message, model, max_tokens, json_mode)


class FakeImageProvider(ImageProvider):
    """Counts calls and the peak number of simultaneous calls."""

    def __init__(self, fail_on: Optional[Callable[[str], bool]] = None, delay: float = 0.01):
        self.fail_on = fail_on
        self.delay = delay
        self.calls: List[str] = []
        self.tiers: List[ImageModelTier] = []
        self.in_flight = 0
        self.max_in_flight = 0

    @property
    def name(self) -> str:
        return "fake-images"

    async def generate(
        self,
        prompt: str,
        size: SizeClass,
        style: ImageStyle,
        tier: ImageModelTier = ImageModelTier.BALANCED,
    ) -> ImageResult:
        self.calls.append(prompt)
        self.tiers.append(tier)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            if self.fail_on is not None and self.fail_on(prompt):
                raise RuntimeError("image service unavailable")
            return ImageResult(success=True, url=f"https://img.example.com/{len(self.calls)}.png")
        finally:
            self.in_flight -= 1


def payload(user_message: str) -> dict:
    """The JSON payload an agent sent in its user message."""
    return json.loads(user_message.split("# INPUT", 1)[1].split("# PREVIOUS ERROR", 1)[0].strip())


@pytest.fixture
def registry():
    return get_registry()


@pytest.fixture
def request_factory():
    def build(**options: Any) -> CompositionRequest:
        return CompositionRequest(
            vision=VisionDocument(
                project_name="Forge",
                description="A deployment platform for backend developers",
                target_audience="developers",
                tone="confident",
                aesthetic=["dark", "technical"],
            ),
            pages=[PageRequest()],
            options=ComposerOptions(**options),
        )
    return build
