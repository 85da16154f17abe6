from __future__ import annotations
from typing import Optional
from pydantic import BaseModel, Field


class Task(BaseModel):
	title: str = ""
	description: str = ""
	criteria: str = ""


class EvaluateRequest(BaseModel):
	task: Task = Field(default_factory=Task)
	answer: Optional[str] = None


class Verdict(BaseModel):
	# Shape of the verdicts built locally; a usable model reply is relayed as parsed
	success: bool
	feedback: str
	details: str = ""


class HealthResponse(BaseModel):
	status: str = "OK"
	message: str
