import logging
import os
import sys

from congregation.rules.models import Rules

logger = logging.getLogger(__name__)


def missing_required_env(rules: Rules) -> list[str]:
    return [name for name in rules.ops.required_env if name not in os.environ]


def validate_ops_rules(rules: Rules) -> None:
    """
    Validate operational requirements before startup.
    Exits the process when required environment variables are missing.
    """
    missing = missing_required_env(rules)
    if missing:
        logger.critical("Missing required environment variables: %s", ", ".join(missing))
        sys.exit(1)

    if rules.auth.require_cron_secret and rules.auth.cron_secret_env not in os.environ:
        logger.critical("Cron secret %s must be set", rules.auth.cron_secret_env)
        sys.exit(1)

    logger.info("Configuration validated.")
