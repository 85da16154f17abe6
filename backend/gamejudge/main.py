from __future__ import annotations
import logging
from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from .completion_client import CompletionClient
from .evaluator import AnswerEvaluator
from .settings import Settings, settings as default_settings
from .routers import evaluate, health

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
	logging.basicConfig(
		level=level.upper(),
		format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
	)


def create_app(cfg: Optional[Settings] = None, client: Optional[CompletionClient] = None) -> FastAPI:
	cfg = cfg or default_settings
	app = FastAPI(title="Mr. Pinchas Answer Evaluator")
	app.state.settings = cfg

	app.add_middleware(
		CORSMiddleware,
		allow_origins=cfg.cors_origin_list(),
		allow_methods=["*"],
		allow_headers=["*"],
	)
	app.include_router(health.router)
	app.include_router(evaluate.router)
	app.add_exception_handler(RequestValidationError, evaluate.invalid_request_handler)

	# Static front end at / (mounted last so the API routes win)
	frontend_dir = Path(cfg.frontend_dir).resolve()
	if frontend_dir.is_dir():
		app.mount("/", StaticFiles(directory=frontend_dir, html=True), name="frontend")
	else:
		logger.info("Front end directory %s not found, serving the API only", frontend_dir)

	@app.on_event("startup")
	async def startup_event():
		configure_logging(cfg.log_level)
		# Fail fast: no key, no server
		cfg.require_api_key()
		upstream = client
		app.state.owns_client = upstream is None
		if upstream is None:
			upstream = CompletionClient.from_settings(cfg)
		app.state.client = upstream
		app.state.evaluator = AnswerEvaluator(upstream, cfg)
		logger.info("Completion service ready (model=%s, key=%s)", cfg.openai_model, cfg.masked_api_key())
		logger.info("Mr. Pinchas server running on http://%s:%d", cfg.host, cfg.port)

	@app.on_event("shutdown")
	async def shutdown_event():
		if getattr(app.state, "owns_client", False):
			await app.state.client.aclose()

	return app


app = create_app()
