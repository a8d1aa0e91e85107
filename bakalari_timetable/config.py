#!/usr/bin/env python3
"""
Configuration management for Bakalari Timetable.

- Loads and merges a JSON config file, environment variables and explicit arguments.
- Validates configuration.
- Opens the matching session (credentialed or anonymous).
"""
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import httpx
from pydantic import BaseModel, ValidationError, field_validator, model_validator

from .session import BakalariSession
from .utils.error_utils import ConfigError

logger = logging.getLogger(__name__)

ENV_URL = "BAKALARI_URL"
ENV_USERNAME = "BAKALARI_USERNAME"
ENV_PASSWORD = "BAKALARI_PASSWORD"


class PortalConfig(BaseModel):
    """Where the portal lives and, optionally, how to log in."""
    url: str
    username: Optional[str] = None
    password: Optional[str] = None

    class Config:
        frozen = True

    @field_validator("url")
    @classmethod
    def validate_url(cls, value: str) -> str:
        value = value.strip()
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"url must start with http:// or https://, got {value!r}")
        try:
            httpx.URL(value)
        except (httpx.InvalidURL, ValueError) as e:
            raise ValueError(f"url is not a valid URL: {e}") from e
        return value

    @model_validator(mode='after')
    def validate_credentials(self):
        """Username and password come together or not at all."""
        if (self.username is None) != (self.password is None):
            raise ValueError("username and password must be given together")
        return self

    @property
    def has_credentials(self) -> bool:
        return self.username is not None

    async def open_session(self, **kwargs: Any) -> BakalariSession:
        """Open a renewing session when credentials are configured, else an anonymous one."""
        if self.has_credentials:
            logger.info(f"Opening session for {self.url} as {self.username}")
            return await BakalariSession.from_credentials(self.url, self.username, self.password, **kwargs)
        logger.info(f"Opening anonymous session for {self.url}")
        return await BakalariSession.anonymous(self.url, **kwargs)

    def __repr__(self) -> str:
        return f"PortalConfig(url={self.url!r}, username={self.username!r})"


def _load_json(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"Config file not found: {path}") from e
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")
    return data


def load_config(
    path: Optional[Union[str, Path]] = None,
    url: Optional[str] = None,
    environ: Optional[Dict[str, str]] = None,
) -> PortalConfig:
    """
    Build the configuration from its sources.

    Later sources override earlier ones: the JSON file, then the
    BAKALARI_URL / BAKALARI_USERNAME / BAKALARI_PASSWORD environment variables,
    then the explicit ``url`` argument.

    Args:
        path: Optional JSON file with ``url``, ``username``, ``password``.
        url: Optional portal URL (e.g. from the command line).
        environ: Environment to read, defaults to os.environ.

    Raises:
        ConfigError: If a source cannot be read or the result is invalid.
    """
    environ = os.environ if environ is None else environ
    values: Dict[str, Any] = {}

    if path is not None:
        values.update(_load_json(Path(path)))
        logger.debug(f"Loaded config file {path}")

    for key, env_name in (("url", ENV_URL), ("username", ENV_USERNAME), ("password", ENV_PASSWORD)):
        if environ.get(env_name):
            values[key] = environ[env_name]

    if url is not None:
        values["url"] = url

    if "url" not in values:
        raise ConfigError(f"No portal url configured (use --url, a config file or {ENV_URL})")

    try:
        return PortalConfig(**{k: values.get(k) for k in ("url", "username", "password")})
    except ValidationError as e:
        # Only the messages: the input values may hold the password
        reasons = "; ".join(err["msg"] for err in e.errors())
        raise ConfigError(f"Invalid configuration: {reasons}") from e
