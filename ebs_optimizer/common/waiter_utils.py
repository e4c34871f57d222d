"""
Polling waiters for snapshots and volumes.

Every wait has an explicit deadline. The delay between polls doubles from
``initial_delay`` up to ``max_delay``. Running past the deadline raises
WaitTimeoutError, which is kept distinct from the ClientError raised by AWS.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable

from botocore.exceptions import ClientError

from ebs_optimizer.common.retry_utils import get_error_code
from ebs_optimizer.config import (
    NOT_YET_VISIBLE_ERROR_CODES,
    POLL_INITIAL_DELAY_SECONDS,
    POLL_MAX_DELAY_SECONDS,
    SNAPSHOT_WAIT_TIMEOUT_SECONDS,
    STATE_AVAILABLE,
    VOLUME_WAIT_TIMEOUT_SECONDS,
)
from ebs_optimizer.exceptions import (
    ResourceNotFoundError,
    SnapshotFailedError,
    WaitTimeoutError,
)


@dataclass(frozen=True)
class WaitSettings:
    """Deadline and backoff bounds for one kind of wait."""

    timeout_seconds: float
    initial_delay: float = POLL_INITIAL_DELAY_SECONDS
    max_delay: float = POLL_MAX_DELAY_SECONDS


@dataclass(frozen=True)
class WaitPolicy:
    """Wait settings for the two resource kinds the optimizer polls."""

    snapshot: WaitSettings = WaitSettings(SNAPSHOT_WAIT_TIMEOUT_SECONDS)
    volume: WaitSettings = WaitSettings(VOLUME_WAIT_TIMEOUT_SECONDS)


def wait_for_state(
    describe: Callable[[], dict],
    is_done: Callable[[dict], bool],
    resource_id: str,
    expected_state: str,
    settings: WaitSettings,
):
    """
    Poll ``describe`` until ``is_done`` accepts its result.

    A describe call failing with a NotFound code counts as "not done yet":
    EC2 reads can lag behind a create for a short while.

    Args:
        describe: Callable returning the current resource description
        is_done: Predicate over the description; may raise to abort the wait
        resource_id: Resource being waited on (used in the timeout message)
        expected_state: Target state (used in the timeout message)
        settings: Deadline and backoff bounds

    Returns:
        The description that satisfied ``is_done``

    Raises:
        WaitTimeoutError: If the deadline passes first
        ClientError: Any other error raised by ``describe``
    """
    deadline = time.monotonic() + settings.timeout_seconds
    delay = settings.initial_delay
    while True:
        try:
            observation = describe()
        except ClientError as e:
            if get_error_code(e) not in NOT_YET_VISIBLE_ERROR_CODES:
                raise
            logging.debug("%s is not visible yet (%s)", resource_id, get_error_code(e))
        else:
            if is_done(observation):
                return observation
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise WaitTimeoutError(resource_id, expected_state, settings.timeout_seconds)
        logging.debug("Waiting %.1fs before polling %s again", min(delay, remaining), resource_id)
        time.sleep(min(delay, remaining))
        delay = min(delay * 2, settings.max_delay)


def _describe_snapshot(ec2_client, snapshot_id):
    response = ec2_client.describe_snapshots(SnapshotIds=[snapshot_id])
    if not response["Snapshots"]:
        raise ResourceNotFoundError(snapshot_id)
    return response["Snapshots"][0]


def _describe_volume(ec2_client, volume_id):
    response = ec2_client.describe_volumes(VolumeIds=[volume_id])
    if not response["Volumes"]:
        raise ResourceNotFoundError(volume_id)
    return response["Volumes"][0]


def wait_snapshot_completed(ec2_client, snapshot_id, volume_id, settings):
    """
    Block until a snapshot is completed, printing state and progress on every poll.

    Raises:
        SnapshotFailedError: If the snapshot enters the error state
        WaitTimeoutError: If the snapshot is still pending at the deadline
    """

    def _is_completed(snapshot):
        state = snapshot["State"]
        progress = snapshot.get("Progress", "0%")
        print(f"Snapshot {snapshot_id} creation state is {state}, {progress} done.")
        if state == "error":
            raise SnapshotFailedError(snapshot_id, volume_id)
        return state == "completed"

    return wait_for_state(
        lambda: _describe_snapshot(ec2_client, snapshot_id),
        _is_completed,
        snapshot_id,
        "completed",
        settings,
    )


def wait_volume_available(ec2_client, volume_id, settings):
    """
    Block until a volume reports the available state again.

    Raises:
        WaitTimeoutError: If the volume is not available at the deadline
    """
    return wait_for_state(
        lambda: _describe_volume(ec2_client, volume_id),
        lambda volume: volume["State"] == STATE_AVAILABLE,
        volume_id,
        STATE_AVAILABLE,
        settings,
    )
