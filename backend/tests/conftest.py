"""Pytest configuration and fixtures."""

import pytest

from gamejudge.models import Task
from gamejudge.settings import Settings


class FakeCompletionClient:
	"""Stands in for the completion service: returns a canned reply or raises."""

	def __init__(self, reply: str = "", error: Exception | None = None) -> None:
		self.reply = reply
		self.error = error
		self.calls: list[dict] = []

	async def complete(self, system, prompt, **kwargs) -> str:
		self.calls.append({"system": system, "prompt": prompt, **kwargs})
		if self.error is not None:
			raise self.error
		return self.reply

	async def aclose(self) -> None:
		pass


@pytest.fixture
def settings():
	return Settings(OPENAI_API_KEY="sk-test-0123456789", FRONTEND_DIR="__no_frontend__")


@pytest.fixture
def make_client():
	return FakeCompletionClient


@pytest.fixture
def task():
	return Task(
		title="Email to the staff",
		description="Help Mr. Pinchas write an email announcing a new AI tool",
		criteria="Mentions the tool, a benefit, and a next step",
	)
