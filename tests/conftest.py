"""Pytest configuration and shared fixtures."""
import asyncio
import os
from collections.abc import Callable
from typing import Any

import pytest

from aidea.llm import ChatMessage, LLMProvider, LLMResponse
from aidea.memory import create_conversation_memory
from aidea.reasoning import ReasoningStateMachine, Scheduler, TaskHandle


class ManualHandle(TaskHandle):
    def __init__(self, callback: Callable[[], None]) -> None:
        self.callback = callback
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class ManualScheduler(Scheduler):
    """Scheduler whose timers only fire when a test says so."""

    def __init__(self) -> None:
        self.handles: list[ManualHandle] = []

    def call_every(self, interval: float, callback: Callable[[], None]) -> TaskHandle:
        handle = ManualHandle(callback)
        self.handles.append(handle)
        return handle

    @property
    def live(self) -> list[ManualHandle]:
        return [handle for handle in self.handles if not handle.cancelled]

    def fire(self, times: int = 1) -> None:
        """Fire every live timer ``times`` times."""
        for _ in range(times):
            for handle in self.live:
                handle.callback()


class FakeLLMProvider(LLMProvider):
    """Provider returning canned responses, optionally held until released."""

    def __init__(self, responses: list[Any] | None = None, model: str = "temper-1") -> None:
        self._model = model
        self.responses = list(responses or [])
        self.calls: list[dict[str, Any]] = []
        self.gate: asyncio.Event | None = None
        self.closed = False

    @property
    def model(self) -> str:
        return self._model

    async def chat_completion(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        **kwargs: Any
    ) -> LLMResponse:
        self.calls.append({"messages": messages, "model": model or self._model})
        if self.gate is not None:
            await self.gate.wait()
        response = self.responses.pop(0) if self.responses else "ok"
        if isinstance(response, BaseException):
            raise response
        if isinstance(response, LLMResponse):
            return response
        return LLMResponse(content=response, model=model or self._model)

    async def close(self) -> None:
        self.closed = True


@pytest.fixture(scope="session")
def api_keys():
    """Return API keys from environment."""
    return {"openrouter": os.getenv("OPENROUTER_API_KEY")}


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def machine(scheduler):
    return ReasoningStateMachine(scheduler=scheduler)


@pytest.fixture
def fake_llm():
    return FakeLLMProvider()


@pytest.fixture
def memory():
    return create_conversation_memory("memory")


@pytest.fixture
def sample_response():
    """Assistant reply exercising every block kind."""
    return (
        "## Overview\n"
        "Here is **bold** and *italic* with `x < y`.\n"
        "\n"
        "| Name | Value |\n"
        "| --- | --- |\n"
        "| a | 1 |\n"
        "| b | 2 |\n"
        "\n"
        "Steps:\n"
        "1. First\n"
        "2. Second\n"
        "\n"
        "```py\n"
        "print('<hi>')\n"
        "```\n"
        "- done\n"
    )


@pytest.fixture
def reasoning_details():
    """OpenRouter-style structured reasoning payload."""
    return [
        {"type": "reasoning.text", "text": "Read the question"},
        {"type": "reasoning.text", "text": "Sketch an answer"},
    ]
