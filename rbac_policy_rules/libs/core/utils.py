"""
Core Utilities

Common utility functions used across the policy rules tool.
"""

import logging
import urllib3
from typing import Type

from .constants import ErrorMessages
from .exceptions import ClusterAccessError, PolicyRulesError


def setup_logging(debug: bool = False) -> None:
    """
    Set up logging configuration for the application.

    Log records go to stderr so they never mix with rendered output.

    Args:
        debug: Enable debug logging level
    """
    level = logging.DEBUG if debug else logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)

    formatter = logging.Formatter(
        '%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # Reduce noise from urllib3 when using insecure connections
    logging.getLogger('urllib3').setLevel(logging.WARNING)

    if debug:
        logger = logging.getLogger(__name__)
        logger.debug("Debug mode enabled")


def disable_ssl_warnings() -> None:
    """Disable SSL warnings when --skip-tls is used"""
    urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)


def handle_api_error(error: Exception, resource: str,
                     exception_class: Type[PolicyRulesError] = ClusterAccessError) -> None:
    """
    Centralized API error handling for Kubernetes API exceptions

    Args:
        error: The caught exception (ApiException or other)
        resource: Resource being listed, used in the message
        exception_class: The specific exception class to raise

    Raises:
        PolicyRulesError: Appropriate error type with user-friendly message
    """
    status = getattr(error, 'status', None)

    if status == 401:
        raise exception_class(ErrorMessages.ClusterError.UNAUTHORIZED.format(resource=resource)) from error

    if status == 403:
        raise exception_class(ErrorMessages.ClusterError.FORBIDDEN.format(resource=resource)) from error

    reason = getattr(error, 'reason', None) or error
    raise exception_class(ErrorMessages.ClusterError.API_FAILURE.format(resource=resource, error=reason)) from error
