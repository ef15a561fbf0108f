"""Shared fixtures for unit tests.

Provides a fake ModelBackend so flows can be exercised without calling Gemini.
"""

from typing import Any, Optional

import pytest

from pocket_chef.llm.invoker import ModelBackend


class FakeBackend(ModelBackend):
    """Backend double returning a canned payload and recording every call."""

    def __init__(self, response: Any = None, error: Optional[Exception] = None) -> None:
        self.response = response
        self.error = error
        self.calls: list[dict] = []

    async def generate(self, prompt, schema, temperature=None):
        self.calls.append({"prompt": prompt, "schema": schema, "temperature": temperature})
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def fake_backend():
    """Factory: fake_backend(response=..., error=...) -> FakeBackend."""

    def _make(response: Any = None, error: Optional[Exception] = None) -> FakeBackend:
        return FakeBackend(response=response, error=error)

    return _make
