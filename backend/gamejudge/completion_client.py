from __future__ import annotations
import enum
import logging
import httpx
from typing import Any, Dict, Optional
from .settings import ConfigurationError, Settings

logger = logging.getLogger(__name__)


class UpstreamErrorKind(str, enum.Enum):
	QUOTA = "quota"
	AUTH = "auth"
	OTHER = "other"


class UpstreamError(Exception):
	def __init__(self, kind: UpstreamErrorKind, message: str, *, status_code: Optional[int] = None) -> None:
		super().__init__(message)
		self.kind = kind
		self.message = message
		self.status_code = status_code


def classify_error_body(body: Any) -> UpstreamErrorKind:
	"""Map a provider error body ({"error": {"code", "type", ...}}) to an error kind."""
	error = body.get("error") if isinstance(body, dict) else None
	if not isinstance(error, dict):
		return UpstreamErrorKind.OTHER
	code = str(error.get("code") or "")
	err_type = str(error.get("type") or "")
	if "insufficient_quota" in (code, err_type):
		return UpstreamErrorKind.QUOTA
	if code == "invalid_api_key":
		return UpstreamErrorKind.AUTH
	return UpstreamErrorKind.OTHER


def _error_message(response: httpx.Response) -> str:
	try:
		body = response.json()
		message = body["error"]["message"]
		if message:
			return str(message)
	except Exception:
		pass
	return f"HTTP {response.status_code}: {response.text[:200]}"


class CompletionClient:
	def __init__(
		self,
		api_key: str,
		*,
		base_url: str,
		model: str,
		timeout: float = 30.0,
		transport: Optional[httpx.AsyncBaseTransport] = None,
	) -> None:
		if not api_key:
			raise ConfigurationError("OPENAI_API_KEY is not configured")
		self.api_key = api_key
		self.model = model
		self.base_url = base_url
		self._headers = {
			"Authorization": f"Bearer {self.api_key}",
			"Content-Type": "application/json",
		}
		self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

	@classmethod
	def from_settings(cls, cfg: Settings, **kwargs: Any) -> "CompletionClient":
		return cls(
			cfg.require_api_key(),
			base_url=cfg.openai_base_url,
			model=cfg.openai_model,
			timeout=cfg.openai_timeout_seconds,
			**kwargs,
		)

	async def complete(
		self,
		system: str,
		prompt: str,
		*,
		temperature: float = 0.3,
		max_tokens: int = 250,
		json_mode: bool = True,
	) -> str:
		payload: Dict[str, Any] = {
			"model": self.model,
			"messages": [
				{"role": "system", "content": system},
				{"role": "user", "content": prompt},
			],
			"temperature": temperature,
			"max_tokens": max_tokens,
		}
		if json_mode:
			payload["response_format"] = {"type": "json_object"}
		logger.debug("Requesting completion from %s (model=%s)", self.base_url, self.model)
		try:
			r = await self._client.post(self.base_url, headers=self._headers, json=payload)
			r.raise_for_status()
		except httpx.HTTPStatusError as http_err:
			response = http_err.response
			try:
				body = response.json()
			except ValueError:
				body = None
			kind = classify_error_body(body)
			raise UpstreamError(kind, _error_message(response), status_code=response.status_code) from http_err
		except httpx.RequestError as net_err:
			raise UpstreamError(UpstreamErrorKind.OTHER, f"{type(net_err).__name__}: {net_err}") from net_err
		try:
			data = r.json()
			content = data["choices"][0]["message"]["content"]
		except Exception as err:
			raise UpstreamError(
				UpstreamErrorKind.OTHER,
				f"Unexpected completion response: {r.text[:200]}",
				status_code=r.status_code,
			) from err
		return content or ""

	async def aclose(self) -> None:
		await self._client.aclose()
