"""
Utility functions for the webapp infrastructure program.
"""

import base64
import functools
import json
import logging
from typing import Any, Callable, Dict, List, Optional, TypeVar, cast

from botocore.exceptions import BotoCoreError, ClientError

LOGGER_NAME = "webapp_infra"


def get_logger() -> logging.Logger:
    """Returns the program logger without touching its level or handlers."""
    return logging.getLogger(LOGGER_NAME)


def setup_logging(log_level: str = "INFO") -> logging.Logger:
    """
    Sets up logging configuration for the infrastructure program.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)

    Returns:
        Configured logger instance
    """
    logger = get_logger()
    logger.setLevel(getattr(logging, log_level.upper()))

    # Prevent duplicate handlers
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


F = TypeVar("F", bound=Callable[..., Any])


def lookup_error_handler(default: Any = None) -> Callable[[F], F]:
    """
    Decorator for consistent error handling and logging in read-only AWS lookups.
    Catches AWS ClientError and BotoCoreError, logs them, and returns a fresh
    copy of ``default`` instead of raising.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: object, **kwargs: object) -> Any:
            logger = get_logger()
            try:
                return func(*args, **kwargs)
            except ClientError as e:
                error = e.response.get("Error", {})
                code = error.get("Code", "")
                logger.error(f"AWS ClientError in {func.__name__} ({code}): {e}")
            except BotoCoreError as e:
                logger.error(f"AWS client error in {func.__name__}: {e}")
            return list(default) if isinstance(default, list) else default

        return cast(F, wrapper)

    return decorator


def resource_name(project: str, stack: str, resource: str) -> str:
    """Build the ``<project>-<stack>-<resource>`` name used across the stack."""
    return f"{project}-{stack}-{resource}"


def generate_tags(
    project: str,
    stack: str,
    resource: str,
    additional_tags: Optional[Dict[str, str]] = None,
) -> Dict[str, str]:
    """
    Generates the tag set for a resource.

    Args:
        project: Project name from stack configuration
        stack: Pulumi stack name
        resource: Short resource name (e.g. 'vpc', 'pub-sn-0')
        additional_tags: Extra tags merged over the base tags

    Returns:
        Dictionary of tags with at least a 'Name' key
    """
    tags = {"Name": resource_name(project, stack, resource)}
    tags.update(additional_tags or {})
    return tags


def policy_document(statements: List[Dict[str, Any]]) -> str:
    """Serialises IAM policy statements into a policy document string."""
    return json.dumps({"Version": "2012-10-17", "Statement": statements})


def assume_role_policy(service: str) -> str:
    """Trust policy allowing the given AWS service principal to assume a role."""
    return policy_document(
        [
            {
                "Action": "sts:AssumeRole",
                "Effect": "Allow",
                "Principal": {"Service": service},
            }
        ]
    )


def encode_base64(value: str) -> str:
    """Base64-encodes a UTF-8 string."""
    return base64.b64encode(value.encode("utf-8")).decode("ascii")


def decode_base64(value: Optional[str]) -> str:
    """
    Decodes a base64 string into UTF-8 text.

    Returns an empty string for empty input, e.g. an unresolved key during preview.
    """
    if not value:
        return ""
    return base64.b64decode(value).decode("utf-8")
