#!/usr/bin/env python3
"""
Configuration verification script.

This script checks which AI providers, stores and task backends are
configured and tests the Redis connection when one is needed.
"""

import os
import sys
from typing import Tuple

from link_content.utils.config import get_config, is_configured_key, validate_config
from link_content.utils.health import HealthChecker


def check_env_var(name: str, required: bool = False) -> Tuple[bool, str]:
    """Check if an environment variable is set."""
    value = os.environ.get(name)
    if value:
        # Mask sensitive values
        if 'KEY' in name or 'SECRET' in name or 'PASSWORD' in name:
            masked = value[:6] + '...' if len(value) > 6 else '***'
            if not is_configured_key(value):
                return False, f"✗ {name} still holds a placeholder value"
            return True, f"✓ {name} is set ({masked})"
        return True, f"✓ {name} is set ({value})"
    if required:
        return False, f"✗ {name} is REQUIRED but not set"
    return False, f"⚠ {name} is not set (optional)"


def main():
    """Main verification function."""
    config = get_config()

    print("=" * 60)
    print("Link Content Workflow - Configuration Verification")
    print("=" * 60)

    print("\nAI Providers:")
    print("-" * 60)
    for var in ('OPENAI_API_KEY', 'GEMINI_API_KEY', 'ANTHROPIC_API_KEY'):
        _, message = check_env_var(var)
        print(message)
    providers = config.configured_providers()
    print(f"Available providers: {', '.join(providers) if providers else 'none'}")

    print("\nStorage and Background Tasks:")
    print("-" * 60)
    print(f"JOB_STORE = {config.JOB_STORE}")
    print(f"TASK_BACKEND = {config.TASK_BACKEND}")
    for var in ('API_KEYS', 'REDIS_URL', 'CELERY_BROKER_URL', 'CELERY_RESULT_BACKEND'):
        _, message = check_env_var(var)
        print(message)

    checker = HealthChecker(config)
    redis_status = checker.check_redis()
    if redis_status["status"] == "healthy":
        print(f"✓ Redis reachable (version {redis_status['version']})")
    elif redis_status["status"] == "unhealthy":
        print(f"✗ Redis unreachable: {redis_status['error']}")

    errors = validate_config(config)
    if redis_status["status"] == "unhealthy":
        errors.append("Redis is not reachable")

    print("\n" + "=" * 60)
    if not errors:
        print("✓ Configuration looks good!")
        print("=" * 60)
        return 0

    for error in errors:
        print(f"✗ {error}")
    print("=" * 60)
    return 1


if __name__ == '__main__':
    sys.exit(main())
