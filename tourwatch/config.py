"""
Configuration management for Tourwatch.

Three layers, lowest precedence first:
- built-in defaults (the constants below)
- tourwatch.yml: optional repository-level settings
- action inputs: INPUT_* environment variables set by GitHub Actions

The pull-request context (repository, PR number) is read from the
workflow event payload.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping

import yaml

from .errors import ConfigError, MissingContextError


DEFAULT_TOUR_PATH = ".tours"
TOUR_SUFFIX = ".tour"
COMMENT_PREFIX = "### Tour Watch"
CONFIG_FILENAME = "tourwatch.yml"

GITHUB_API_BASE = "https://api.github.com"
DEFAULT_PER_PAGE = 100
DEFAULT_TIMEOUT = 30.0

PULL_REQUEST_EVENTS = ("pull_request", "pull_request_target")


@dataclass(frozen=True)
class TourwatchConfig:
    """Resolved settings for a single run."""
    tour_path: str = DEFAULT_TOUR_PATH
    tour_suffix: str = TOUR_SUFFIX
    silent: bool = False
    api_url: str = GITHUB_API_BASE
    timeout: float = DEFAULT_TIMEOUT

    @classmethod
    def load(cls, config_path: Path | None = None) -> "TourwatchConfig":
        """Load tourwatch.yml, falling back to defaults when it is absent.

        An explicitly given ``config_path`` must exist.
        """
        explicit = config_path is not None
        path = config_path if explicit else Path.cwd() / CONFIG_FILENAME

        if not path.exists():
            if explicit:
                raise ConfigError(f"Config file not found: {path}")
            return cls()

        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"{path} must contain a mapping of settings")
        return cls._parse(data, source=str(path))

    @classmethod
    def _parse(cls, data: Mapping[str, Any], source: str) -> "TourwatchConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(key for key in data if key not in known)
        if unknown:
            raise ConfigError(
                f"Unknown setting(s) in {source}: {', '.join(unknown)} "
                f"(allowed: {', '.join(sorted(known))})"
            )

        empty = sorted(key for key, value in data.items() if value is None or value == "")
        if empty:
            raise ConfigError(f"Invalid value in {source}: {', '.join(empty)} must not be empty")

        for key in ("tour_path", "tour_suffix", "api_url"):
            if key in data and not isinstance(data[key], str):
                raise ConfigError(f"Invalid value in {source}: {key} must be a string")

        config = cls()
        try:
            timeout = float(data.get("timeout", config.timeout))
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid value in {source}: timeout ({e})") from e
        if timeout <= 0:
            raise ConfigError(f"Invalid value in {source}: timeout must be positive")

        return replace(
            config,
            tour_path=str(data.get("tour_path", config.tour_path)),
            tour_suffix=str(data.get("tour_suffix", config.tour_suffix)),
            silent=parse_bool(data.get("silent", config.silent)),
            api_url=str(data.get("api_url", config.api_url)).rstrip("/"),
            timeout=timeout,
        )

    def with_inputs(
        self,
        inputs: "ActionInputs",
        environ: Mapping[str, str] | None = None,
    ) -> "TourwatchConfig":
        """Overlay action inputs (and GITHUB_API_URL) on top of this config."""
        environ = os.environ if environ is None else environ
        config = self
        if inputs.tour_path:
            config = replace(config, tour_path=inputs.tour_path)
        if inputs.silent is not None:
            config = replace(config, silent=inputs.silent)
        api_url = environ.get("GITHUB_API_URL")
        if api_url:
            config = replace(config, api_url=api_url.rstrip("/"))
        return config


@dataclass(frozen=True)
class ActionInputs:
    """Inputs declared in action.yml."""
    repo_token: str
    silent: bool | None = None
    tour_path: str | None = None

    def __repr__(self) -> str:
        return f"ActionInputs(repo_token='***', silent={self.silent!r}, tour_path={self.tour_path!r})"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ActionInputs":
        environ = os.environ if environ is None else environ
        token = get_input("repo-token", environ)
        if not token:
            raise ConfigError("Input required and not supplied: repo-token")

        silent = get_input("silent", environ)
        return cls(
            repo_token=token,
            silent=parse_bool(silent) if silent else None,
            tour_path=get_input("tour-path", environ) or None,
        )


@dataclass(frozen=True)
class PullRequestContext:
    """The repository and pull request the workflow was triggered for."""
    repo: str  # full_name like "owner/repo"
    number: int

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "PullRequestContext":
        """Read the pull-request context from the GitHub Actions environment."""
        environ = os.environ if environ is None else environ

        event_name = environ.get("GITHUB_EVENT_NAME", "")
        if event_name not in PULL_REQUEST_EVENTS:
            raise MissingContextError(
                f"Couldn't find pull request info in current context "
                f"(event '{event_name or 'unknown'}' is not a pull_request event)"
            )

        payload = _read_event_payload(environ.get("GITHUB_EVENT_PATH"))
        return cls.from_payload(payload, fallback_repo=environ.get("GITHUB_REPOSITORY", ""))

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], fallback_repo: str = "") -> "PullRequestContext":
        pull_request = payload.get("pull_request") or {}
        number = pull_request.get("number") or payload.get("number")
        if not number:
            raise MissingContextError("Couldn't find pull request number in event payload")

        repository = payload.get("repository") or {}
        repo = repository.get("full_name") or fallback_repo
        if "/" not in repo:
            raise MissingContextError("Couldn't find repository full name in current context")

        return cls(repo=repo, number=int(number))


def input_key(name: str) -> str:
    """Environment variable the Actions runner uses for an input."""
    return f"INPUT_{name.replace(' ', '_').upper()}"


def get_input(name: str, environ: Mapping[str, str]) -> str:
    return environ.get(input_key(name), "").strip()


def parse_bool(value: Any) -> bool:
    """Only a case-insensitive "true" (or a real True) enables a flag."""
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() == "true"


def _read_event_payload(event_path: str | None) -> dict[str, Any]:
    if not event_path or not Path(event_path).exists():
        raise MissingContextError("Couldn't find the workflow event payload (GITHUB_EVENT_PATH)")
    try:
        with open(event_path, encoding="utf-8") as f:
            payload = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise MissingContextError(f"Couldn't read event payload {event_path}: {e}") from e
    if not isinstance(payload, dict):
        raise MissingContextError(f"Event payload {event_path} is not a JSON object")
    return payload
