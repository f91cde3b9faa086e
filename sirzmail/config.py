"""
Configuration management for Sirz Mail.

Handles persistent configuration including:
- OpenAI API key storage and validation
- Chat model selection for template generation

Config is stored in config.json next to the executable/project root.
"""

import json
import logging
import os
from typing import Optional

from sirzmail.paths import get_config_path

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o"


def load_config() -> dict:
    """Load configuration from config.json."""
    config_path = get_config_path()
    if config_path.exists():
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.warning(f"Ignoring unreadable config file {config_path}: {e}")
            return {}
    return {}


def save_config(config: dict) -> None:
    """Save configuration to config.json."""
    config_path = get_config_path()
    with open(config_path, 'w', encoding='utf-8') as f:
        json.dump(config, f, indent=2)


def get_api_key() -> Optional[str]:
    """
    Get the OpenAI API key.

    Priority:
    1. Environment variable OPENAI_API_KEY
    2. Stored in config.json
    """
    env_key = os.environ.get("OPENAI_API_KEY")
    if env_key:
        return env_key

    config = load_config()
    return config.get("openai_api_key")


def set_api_key(api_key: str) -> None:
    """Save the OpenAI API key to config.json."""
    config = load_config()
    config["openai_api_key"] = api_key
    save_config(config)
    # Also set in environment for current session
    os.environ["OPENAI_API_KEY"] = api_key


def get_model() -> str:
    """Chat model used for generation: SIRZ_MAIL_MODEL, then config.json, then the default."""
    env_model = os.environ.get("SIRZ_MAIL_MODEL")
    if env_model:
        return env_model
    return load_config().get("model") or DEFAULT_MODEL


def validate_api_key(api_key: str) -> tuple[bool, str]:
    """
    Validate an OpenAI API key without using tokens.

    Uses the /models endpoint which is free and returns the list of available models.

    Returns:
        (is_valid, message) tuple
    """
    if not api_key:
        return False, "API key is empty"

    if not api_key.startswith("sk-"):
        return False, "API key should start with 'sk-'"

    try:
        from openai import OpenAI
        client = OpenAI(api_key=api_key)
        models = client.models.list()
        return True, f"API key is valid. Access to {len(list(models))} models."
    except Exception as e:
        error_msg = str(e)
        if "401" in error_msg or "invalid_api_key" in error_msg.lower():
            return False, "Invalid API key"
        elif "429" in error_msg:
            return False, "Rate limited - but key appears valid"
        else:
            return False, f"Validation error: {error_msg}"


async def validate_and_store_api_key(api_key: str, runner) -> tuple[bool, str]:
    """
    Validate `api_key` through `runner` (run.io_bound in the app) and store it when valid.

    The models request blocks, so it never runs on the event loop itself.
    """
    is_valid, message = await runner(validate_api_key, api_key)
    if is_valid:
        set_api_key(api_key)
    else:
        logger.info(f"Rejected API key: {message}")
    return is_valid, message


def ensure_api_key_in_env() -> bool:
    """
    Ensure the API key is loaded into the environment.

    Returns True if an API key is available, False otherwise.
    """
    api_key = get_api_key()
    if api_key:
        os.environ["OPENAI_API_KEY"] = api_key
        return True
    return False
