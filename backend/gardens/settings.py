"""Settings for the gardens directory service."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _env_field(default, *env_names: str):
	if env_names:
		alias = AliasChoices(*env_names) if len(env_names) > 1 else env_names[0]
		return Field(default=default, validation_alias=alias)
	return Field(default=default)


class Settings(BaseSettings):
	default_chain_id: int = _env_field(100, "DEFAULT_CHAIN_ID", "CHAIN_ID")
	# Formatted with the network's metadata file name (e.g. "xdai.json")
	metadata_url_template: str = _env_field(
		"https://raw.githubusercontent.com/1Hive/dao-list/master/{file}",
		"METADATA_URL_TEMPLATE",
	)
	# Per-chain subgraph overrides, JSON mapping {"100": "https://..."}
	subgraph_urls: Dict[int, str] = _env_field({}, "SUBGRAPH_URLS")
	http_timeout_seconds: float = _env_field(10.0, "HTTP_TIMEOUT_SECONDS")
	indexer_page_size: int = _env_field(1000, "INDEXER_PAGE_SIZE")
	filter_debounce_ms: int = _env_field(300, "FILTER_DEBOUNCE_MS")
	# Gardens hidden from the directory, JSON mapping {"100": ["0x..."]}
	voided_gardens: Dict[int, List[str]] = _env_field({}, "VOIDED_GARDENS")

	environment: str = _env_field("production", "ENV", "APP_ENV", "ENVIRONMENT")
	service_name: str = _env_field("gardens-directory", "SERVICE_NAME")
	git_commit: str = _env_field("unknown", "GIT_COMMIT", "COMMIT_SHA", "SOURCE_VERSION")
	obs_enabled: bool = _env_field(True, "OBS_ENABLED")
	obs_log_level: str = _env_field("INFO", "LOG_LEVEL")
	obs_log_sampling_rate_info: float = _env_field(1.0, "LOG_SAMPLING_RATE_INFO")
	obs_metrics_public: bool = _env_field(False, "OBS_METRICS_PUBLIC")
	cors_allow_origins: Any = _env_field((), "CORS_ALLOW_ORIGINS")
	api_prefix: Optional[str] = _env_field(None, "API_PREFIX")

	model_config = SettingsConfigDict(
		env_prefix="",
		env_file=".env",
		case_sensitive=False,
		env_nested_delimiter="__",
	)

	def is_dev(self) -> bool:
		return self.environment.lower() in ("dev", "development")

	@property
	def filter_debounce_seconds(self) -> float:
		return max(0, self.filter_debounce_ms) / 1000.0

	@field_validator("cors_allow_origins", mode="before")
	def _split_cors(cls, value):  # type: ignore[override]
		if value in (None, ""):
			return ()
		if isinstance(value, str):
			return tuple(part.strip() for part in value.split(",") if part.strip())
		if isinstance(value, (list, tuple, set)):
			return tuple(str(item).strip() for item in value if str(item).strip())
		return ()


def _normalise_level(level: str) -> str:
	return level.upper()


settings = Settings()
settings.obs_log_level = _normalise_level(settings.obs_log_level)
