"""
Startup Environment Variable Validation

Centralized validation of critical environment variables, called early
in application startup. In production, fails fast on critical
misconfigurations. In development, warns but continues.

Does NOT re-validate things already enforced elsewhere:
- CORS_ORIGINS: enforced in cors_config.py (blocks wildcard in production)
"""

import os
import logging

logger = logging.getLogger(__name__)

VALID_ENVIRONMENTS = {"development", "staging", "production", "test"}
VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def validate_environment() -> list[str]:
    """
    Validate critical environment variables at startup.

    Returns list of warning messages (empty = all good).
    Raises RuntimeError in production for critical issues.
    """
    env = os.getenv("ENVIRONMENT", "development").lower()
    is_production = env == "production"

    warnings: list[str] = []
    errors: list[str] = []

    _check_environment_value(env, warnings)
    _check_integer_vars(warnings)
    _check_log_level(warnings)
    _check_llm_credentials(env, warnings, errors)
    _check_database_url(env, warnings)

    for w in warnings:
        logger.warning(w)

    if errors and is_production:
        for e in errors:
            logger.error(e)
        raise RuntimeError(
            "Environment validation failed in production:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )

    if warnings or errors:
        logger.info(
            "Environment validation complete: %d warning(s)", len(warnings) + len(errors)
        )
    else:
        logger.info("Environment validation passed")

    return warnings + errors


def _check_environment_value(env: str, warnings: list[str]) -> None:
    """Validate ENVIRONMENT is a known value."""
    if env not in VALID_ENVIRONMENTS:
        warnings.append(
            f"ENVIRONMENT={env!r} is not a recognized value. "
            f"Expected one of: {', '.join(sorted(VALID_ENVIRONMENTS))}"
        )


def _check_integer_vars(warnings: list[str]) -> None:
    """Validate integer environment variables parse correctly and are in valid ranges."""
    int_vars = {
        "CORS_MAX_AGE": {"min": 0},
        "UPSTREAM_TIMEOUT_SECONDS": {"min": 1, "max": 300},
        "TOKEN_LIST_CACHE_TTL": {"min": 0},
        "POOLS_CACHE_TTL": {"min": 0},
        "CHAIN_ID": {"min": 1},
        "REDIS_PORT": {"min": 1, "max": 65535},
    }

    for var_name, constraints in int_vars.items():
        raw = os.getenv(var_name)
        if raw is None:
            continue

        try:
            value = int(raw)
        except ValueError:
            warnings.append(f"{var_name}={raw!r} is not a valid integer")
            continue

        min_val = constraints.get("min")
        max_val = constraints.get("max")

        if min_val is not None and value < min_val:
            warnings.append(
                f"{var_name}={value} is below minimum ({min_val})"
            )
        if max_val is not None and value > max_val:
            warnings.append(
                f"{var_name}={value} is above maximum ({max_val})"
            )


def _check_log_level(warnings: list[str]) -> None:
    """Validate LOG_LEVEL is a valid Python log level."""
    raw = os.getenv("LOG_LEVEL")
    if raw is None:
        return

    if raw.upper() not in VALID_LOG_LEVELS:
        warnings.append(
            f"LOG_LEVEL={raw!r} is not a valid log level. "
            f"Expected one of: {', '.join(sorted(VALID_LOG_LEVELS))}"
        )


def _check_llm_credentials(
    env: str, warnings: list[str], errors: list[str]
) -> None:
    """Personality lookup and chat editing need an OpenAI-compatible key."""
    has_key = bool(
        os.getenv("AI_INTEGRATIONS_OPENAI_API_KEY") or os.getenv("OPENAI_API_KEY")
    )
    if has_key or env == "test":
        return

    message = (
        "No LLM API key configured (OPENAI_API_KEY or AI_INTEGRATIONS_OPENAI_API_KEY); "
        "personality lookup and chat editing will fail"
    )
    if env == "production":
        errors.append(message)
    else:
        warnings.append(message)


def _check_database_url(env: str, warnings: list[str]) -> None:
    """SQLite is fine locally but is almost never what a deployment wants."""
    url = os.getenv("DATABASE_URL", "")
    if env == "production" and (not url or url.startswith("sqlite")):
        warnings.append(
            "DATABASE_URL is unset or SQLite in production - "
            "history and buddies will live on local disk"
        )
