"""Configuration for page-bridge, read lazily from the environment (and `.env`)."""

from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class FlatEnvConfig(BaseSettings):
	"""All environment variables in a flat namespace."""

	model_config = SettingsConfigDict(env_file='.env', env_file_encoding='utf-8', case_sensitive=True, extra='allow')

	# Logging
	PAGE_BRIDGE_LOGGING_LEVEL: str = Field(default='info')
	PAGE_BRIDGE_SLOW_CALL_THRESHOLD: float = Field(default=0.25, ge=0)

	# Evaluation
	PAGE_BRIDGE_EVALUATION_SCRIPT_URL: str = Field(default='__page_bridge_evaluation_script__')
	PAGE_BRIDGE_JAVASCRIPT_ENABLED: bool = Field(default=True)
	PAGE_BRIDGE_CONTEXT_TIMEOUT: float = Field(default=10.0, gt=0)


class Config:
	"""Proxy that re-reads the environment on every attribute access.

	Tests and long-running processes can flip env vars at runtime and see the change on
	the next read, without anyone holding on to a stale settings object.
	"""

	def __getattr__(self, name: str) -> Any:
		if name.startswith('_'):
			raise AttributeError(f"'{self.__class__.__name__}' object has no attribute '{name}'")

		env_config = FlatEnvConfig()
		if name in type(env_config).model_fields:
			value = getattr(env_config, name)
			if name == 'PAGE_BRIDGE_LOGGING_LEVEL':
				return value.lower()
			return value

		raise AttributeError(f"'{self.__class__.__name__}' object has no attribute '{name}'")


CONFIG = Config()
