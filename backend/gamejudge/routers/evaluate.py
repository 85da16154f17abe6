from __future__ import annotations
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..evaluator import AnswerEvaluator, crash_verdict
from ..models import EvaluateRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["evaluate"])

EVALUATE_PATH = "/api/evaluate"


def get_evaluator(request: Request) -> AnswerEvaluator:
	# Built once at startup, see main.create_app
	return request.app.state.evaluator


def _describe_errors(exc: RequestValidationError) -> str:
	parts = []
	for err in exc.errors():
		loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
		parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
	return "; ".join(parts) or "invalid request"


async def invalid_request_handler(request: Request, exc: RequestValidationError):
	# The game front end only understands verdicts, so a bad evaluate body still gets one
	if request.url.path != EVALUATE_PATH:
		return await request_validation_exception_handler(request, exc)
	message = _describe_errors(exc)
	logger.warning("Rejected evaluate request: %s", message)
	return JSONResponse(status_code=500, content=crash_verdict(message))


@router.post("/evaluate")
async def evaluate(req: EvaluateRequest, evaluator: AnswerEvaluator = Depends(get_evaluator)):
	result = await evaluator.evaluate(req.task, req.answer)
	return JSONResponse(status_code=result.status_code, content=result.verdict)
