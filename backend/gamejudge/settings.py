from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class ConfigurationError(RuntimeError):
	"""Raised when a required setting is missing at startup."""


class Settings(BaseSettings):
	openai_api_key: str | None = Field(default=None, validation_alias="OPENAI_API_KEY")
	# Model to use for judging answers
	openai_model: str = Field(default="gpt-4o-mini", validation_alias="OPENAI_MODEL")
	# Any OpenAI-compatible chat completions endpoint works here
	openai_base_url: str = Field(default="https://api.openai.com/v1/chat/completions", validation_alias="OPENAI_BASE_URL")
	openai_timeout_seconds: float = Field(default=30.0, validation_alias="OPENAI_TIMEOUT_SECONDS")

	# Generation parameters: the verdict is a short JSON object, not prose
	eval_temperature: float = Field(default=0.3, validation_alias="EVAL_TEMPERATURE")
	eval_max_tokens: int = Field(default=250, validation_alias="EVAL_MAX_TOKENS")

	# Answer policy thresholds
	min_answer_length: int = Field(default=5, validation_alias="MIN_ANSWER_LENGTH")
	fallback_min_length: int = Field(default=50, validation_alias="FALLBACK_MIN_LENGTH")
	# Safety clamp on the answer text embedded in the prompt
	max_answer_chars: int = Field(default=8000, validation_alias="MAX_ANSWER_CHARS")

	# Server
	host: str = Field(default="0.0.0.0", validation_alias="HOST")
	port: int = Field(default=3000, validation_alias="PORT")
	frontend_dir: str = Field(default="public", validation_alias="FRONTEND_DIR")
	cors_origins: str = Field(default="*", validation_alias="CORS_ORIGINS")
	log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

	# pydantic-settings v2 style config
	model_config = SettingsConfigDict(env_file=".env", extra="ignore")

	def require_api_key(self) -> str:
		if not self.openai_api_key or not self.openai_api_key.strip():
			raise ConfigurationError(
				"OPENAI_API_KEY is not configured. Create a .env file containing OPENAI_API_KEY=<your key>"
			)
		return self.openai_api_key.strip()

	def masked_api_key(self) -> str:
		key = (self.openai_api_key or "").strip()
		if not key:
			return "<unset>"
		return key[:8] + "..."

	def cors_origin_list(self) -> list[str]:
		return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


settings = Settings()
