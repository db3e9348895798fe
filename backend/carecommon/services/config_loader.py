"""Config loader: landing/program configuration from a JSON file or the parameter store.

Loaded once at startup. The last successfully loaded config is kept as the
process-wide current config.

Parameter store layout (relative to the search path):
    common/public_base_uri           -> "https://api.example.com/public"
    common/redirects/<name>          -> "<url>"
    landing/<landing>/client_id      -> "..."
    landing/<landing>/programs       -> JSON list of programs
"""

import json
from pathlib import Path
from typing import Any, Optional

import structlog
from pydantic import ValidationError

from carecommon.errors import ConfigError
from carecommon.models.config import AppConfig

logger = structlog.get_logger()

_current: Optional[AppConfig] = None


def current_config() -> Optional[AppConfig]:
    """The config loaded last, or None before any load."""
    return _current


def set_current_config(config: Optional[AppConfig]) -> None:
    global _current
    _current = config


def load_config_from_json(path: str) -> AppConfig:
    """Read and decode a JSON config file and make it the current config."""
    try:
        data = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        logger.error("config_read_error", path=path, error=str(e))
        raise ConfigError(f"Cannot read config file {path}: {e}", source="json") from e

    try:
        config = AppConfig.model_validate_json(data)
    except ValidationError as e:
        logger.error("config_parse_error", path=path, error=str(e))
        raise ConfigError(f"Cannot parse config file {path}: {e}", source="json") from e

    set_current_config(config)
    logger.info("config_loaded", source="json", path=path, landings=sorted(config.landing))
    return config


def build_config_tree(params: dict[str, str]) -> dict[str, Any]:
    """Rebuild nested dicts from slash-separated keys; the last segment holds the value."""
    tree: dict[str, Any] = {}
    for key in sorted(params):
        parts = [p for p in key.split("/") if p]
        if not parts:
            continue
        node = tree
        for part in parts[:-1]:
            child = node.setdefault(part, {})
            if not isinstance(child, dict):
                raise ConfigError(f"Parameter '{key}' conflicts with a value at '{part}'", source="param_store")
            node = child
        if isinstance(node.get(parts[-1]), dict):
            raise ConfigError(f"Parameter '{key}' conflicts with nested parameters", source="param_store")
        node[parts[-1]] = params[key]
    return tree


def fetch_parameters(ssm_client: Any, path: str) -> dict[str, str]:
    """Page through every parameter under `path`, keyed relative to it."""
    params: dict[str, str] = {}
    paginator = ssm_client.get_paginator("get_parameters_by_path")
    for page in paginator.paginate(Path=path, WithDecryption=True, Recursive=True):
        for param in page.get("Parameters", []):
            name = param["Name"]
            if name.startswith(path):
                name = name[len(path):]
            params[name.strip("/")] = param["Value"]
    return params


def _index_programs(tree: dict[str, Any]) -> None:
    """Replace each landing's raw programs JSON with programs keyed by organization name."""
    for landing_name, landing in tree.get("landing", {}).items():
        if not isinstance(landing, dict):
            continue
        raw = landing.get("programs")
        if not isinstance(raw, str):
            continue
        if not raw:
            landing["programs"] = {}
            continue
        try:
            programs = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error("config_bad_programs_json", landing=landing_name, error=str(e))
            raise ConfigError(f"Bad programs JSON for landing '{landing_name}': {e}", source="param_store") from e
        if not isinstance(programs, list):
            raise ConfigError(f"Programs for landing '{landing_name}' must be a JSON list", source="param_store")
        landing["programs"] = {p.get("organization_name", ""): p for p in programs}


def _default_ssm_client(region: Optional[str]) -> Any:
    try:
        import boto3
    except ImportError as e:
        raise ConfigError(
            "boto3 is required to read the parameter store; install carecommon[aws]",
            source="param_store",
        ) from e
    return boto3.client("ssm", region_name=region)


def load_config_from_param_store(
    path: str,
    ssm_client: Optional[Any] = None,
    region: Optional[str] = None,
) -> AppConfig:
    """Load config from every parameter under `path` and make it the current config.

    Args:
        path: Parameter search path, e.g. "/carecommon/"
        ssm_client: boto3-style SSM client; created for `region` when omitted
        region: AWS region for the default client
    """
    client = ssm_client if ssm_client is not None else _default_ssm_client(region)

    try:
        params = fetch_parameters(client, path)
    except Exception as e:
        # botocore ClientError carries the AWS error code in e.response
        response = getattr(e, "response", None)
        error = response.get("Error", {}) if isinstance(response, dict) else {}
        logger.error(
            "config_param_store_error",
            path=path,
            code=error.get("Code", type(e).__name__),
            error=error.get("Message", str(e)),
        )
        raise ConfigError(f"Cannot read parameters under {path}: {e}", source="param_store") from e

    tree = build_config_tree(params)
    _index_programs(tree)

    try:
        config = AppConfig.model_validate(tree)
    except ValidationError as e:
        logger.error("config_parse_error", path=path, error=str(e))
        raise ConfigError(f"Cannot decode parameters under {path}: {e}", source="param_store") from e

    set_current_config(config)
    logger.info(
        "config_loaded",
        source="param_store",
        path=path,
        parameters=len(params),
        landings=sorted(config.landing),
    )
    return config
