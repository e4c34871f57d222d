"""
Bounded retry for individual AWS mutation calls.

Throttling and transient service errors are retried with exponential backoff
(``base_delay * 2 ** attempt``, capped at ``max_delay``). Any other ClientError,
or the last one once attempts run out, propagates to the caller.

Each attempt goes through a client that already applies botocore standard
retries, so one mutation makes at most MAX_REQUESTS_PER_MUTATION requests.
"""

import logging
import time

from botocore.exceptions import ClientError

from ebs_optimizer.config import (
    MAX_CALL_ATTEMPTS,
    RETRY_BASE_DELAY_SECONDS,
    RETRY_MAX_DELAY_SECONDS,
    RETRYABLE_ERROR_CODES,
)


def get_error_code(error: ClientError) -> str:
    """Return the AWS error code carried by a ClientError (empty string if absent)."""
    return error.response.get("Error", {}).get("Code", "")


def call_with_retry(
    operation,
    *args,
    max_attempts: int = MAX_CALL_ATTEMPTS,
    base_delay: float = RETRY_BASE_DELAY_SECONDS,
    max_delay: float = RETRY_MAX_DELAY_SECONDS,
    **kwargs,
):
    """
    Invoke ``operation(*args, **kwargs)``, retrying transient AWS errors.

    Args:
        operation: Bound boto3 client method (e.g. ec2_client.modify_volume)
        max_attempts: Total attempts including the first one
        base_delay: Delay before the first retry in seconds
        max_delay: Upper bound for any single delay

    Returns:
        Whatever ``operation`` returns

    Raises:
        ClientError: Non-retryable errors immediately, retryable ones after the last attempt
    """
    for attempt in range(max_attempts):
        try:
            return operation(*args, **kwargs)
        except ClientError as e:
            error_code = get_error_code(e)
            if error_code not in RETRYABLE_ERROR_CODES or attempt == max_attempts - 1:
                raise
            backoff_seconds = min(max_delay, base_delay * 2**attempt)
            logging.warning(
                "AWS returned %s (attempt %d/%d); backing off for %.1f seconds",
                error_code,
                attempt + 1,
                max_attempts,
                backoff_seconds,
            )
            time.sleep(backoff_seconds)
    raise ValueError("max_attempts must be at least 1")
