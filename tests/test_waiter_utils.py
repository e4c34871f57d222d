"""Tests for the polling waiters."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from ebs_optimizer.common.waiter_utils import (
    WaitSettings,
    wait_for_state,
    wait_snapshot_completed,
    wait_volume_available,
)
from ebs_optimizer.exceptions import (
    ResourceNotFoundError,
    SnapshotFailedError,
    WaitTimeoutError,
)
from tests.assertions import assert_equal
from tests.fake_aws import make_client_error


def _snapshot_response(state, progress):
    return {"Snapshots": [{"SnapshotId": "snap-1", "State": state, "Progress": progress}]}


def test_wait_for_state_returns_matching_observation(mock_time):
    """Test the observation that satisfies the predicate is returned."""
    describe = MagicMock(side_effect=[{"State": "creating"}, {"State": "available"}])

    result = wait_for_state(
        describe,
        lambda item: item["State"] == "available",
        "vol-1",
        "available",
        WaitSettings(timeout_seconds=60, initial_delay=1, max_delay=8),
    )

    assert_equal(result, {"State": "available"})
    assert_equal(describe.call_count, 2)
    mock_time.sleep.assert_called_once_with(1)


def test_wait_for_state_backs_off_exponentially(mock_time):
    """Test poll delays double up to max_delay."""
    describe = MagicMock(side_effect=[{"done": False}] * 5 + [{"done": True}])

    wait_for_state(
        describe,
        lambda item: item["done"],
        "snap-1",
        "completed",
        WaitSettings(timeout_seconds=600, initial_delay=5, max_delay=30),
    )

    assert_equal([call.args[0] for call in mock_time.sleep.call_args_list], [5, 10, 20, 30, 30])


def test_wait_for_state_times_out(mock_time):
    """Test the deadline raises WaitTimeoutError instead of polling forever."""
    mock_time.monotonic.side_effect = [0.0, 5.0, 12.0]
    describe = MagicMock(return_value={"done": False})

    with pytest.raises(WaitTimeoutError, match="Timed out after 10s waiting for vol-9 to become available"):
        wait_for_state(
            describe,
            lambda item: item["done"],
            "vol-9",
            "available",
            WaitSettings(timeout_seconds=10, initial_delay=4, max_delay=4),
        )

    assert_equal(describe.call_count, 2)
    mock_time.sleep.assert_called_once_with(4)


def test_wait_for_state_never_sleeps_past_deadline(mock_time):
    """Test the last sleep is shortened to the remaining time."""
    mock_time.monotonic.side_effect = [0.0, 8.0, 11.0]
    describe = MagicMock(return_value={"done": False})

    with pytest.raises(WaitTimeoutError):
        wait_for_state(
            describe,
            lambda item: item["done"],
            "vol-9",
            "available",
            WaitSettings(timeout_seconds=10, initial_delay=5, max_delay=5),
        )

    mock_time.sleep.assert_called_once_with(2.0)


def test_wait_snapshot_completed_prints_progress(mock_time, capsys):
    """Test each poll prints the snapshot state and progress."""
    ec2_client = MagicMock()
    ec2_client.describe_snapshots.side_effect = [
        _snapshot_response("pending", "40%"),
        _snapshot_response("completed", "100%"),
    ]

    wait_snapshot_completed(ec2_client, "snap-1", "vol-1", WaitSettings(timeout_seconds=60))

    captured = capsys.readouterr()
    assert "Snapshot snap-1 creation state is pending, 40% done." in captured.out
    assert "Snapshot snap-1 creation state is completed, 100% done." in captured.out
    ec2_client.describe_snapshots.assert_called_with(SnapshotIds=["snap-1"])
    assert_equal(mock_time.sleep.call_count, 1)


def test_wait_snapshot_completed_error_state(mock_time):
    """Test a snapshot in the error state aborts the wait."""
    ec2_client = MagicMock()
    ec2_client.describe_snapshots.return_value = _snapshot_response("error", "12%")

    with pytest.raises(SnapshotFailedError, match="Snapshot snap-1 of volume vol-1 failed"):
        wait_snapshot_completed(ec2_client, "snap-1", "vol-1", WaitSettings(timeout_seconds=60))

    mock_time.sleep.assert_not_called()


def test_wait_snapshot_completed_missing_snapshot(mock_time):
    """Test a snapshot missing from the response raises ResourceNotFoundError."""
    ec2_client = MagicMock()
    ec2_client.describe_snapshots.return_value = {"Snapshots": []}

    with pytest.raises(ResourceNotFoundError):
        wait_snapshot_completed(ec2_client, "snap-1", "vol-1", WaitSettings(timeout_seconds=60))


def test_wait_volume_available(mock_time):
    """Test the volume waiter polls describe_volumes until available."""
    ec2_client = MagicMock()
    ec2_client.describe_volumes.side_effect = [
        {"Volumes": [{"VolumeId": "vol-1", "State": "creating"}]},
        {"Volumes": [{"VolumeId": "vol-1", "State": "available"}]},
    ]

    volume = wait_volume_available(ec2_client, "vol-1", WaitSettings(timeout_seconds=60))

    assert_equal(volume["State"], "available")
    ec2_client.describe_volumes.assert_called_with(VolumeIds=["vol-1"])


def test_wait_snapshot_completed_tolerates_lagging_describe(mock_time):
    """Test InvalidSnapshot.NotFound right after creation is polled past."""
    ec2_client = MagicMock()
    ec2_client.describe_snapshots.side_effect = [
        make_client_error("InvalidSnapshot.NotFound", "DescribeSnapshots"),
        _snapshot_response("completed", "100%"),
    ]

    snapshot = wait_snapshot_completed(
        ec2_client, "snap-1", "vol-1", WaitSettings(timeout_seconds=60, initial_delay=1)
    )

    assert_equal(snapshot["State"], "completed")
    mock_time.sleep.assert_called_once_with(1)


def test_wait_volume_not_found_until_deadline_times_out(mock_time):
    """Test a volume that never becomes visible ends in WaitTimeoutError."""
    mock_time.monotonic.side_effect = [0.0, 5.0, 12.0]
    ec2_client = MagicMock()
    ec2_client.describe_volumes.side_effect = make_client_error(
        "InvalidVolume.NotFound", "DescribeVolumes"
    )

    with pytest.raises(WaitTimeoutError, match="vol-1 to become available"):
        wait_volume_available(
            ec2_client, "vol-1", WaitSettings(timeout_seconds=10, initial_delay=4)
        )

    assert_equal(ec2_client.describe_volumes.call_count, 2)


def test_wait_for_state_propagates_other_client_errors(mock_time):
    """Test errors other than NotFound end the wait immediately."""
    describe = MagicMock(side_effect=make_client_error("UnauthorizedOperation"))

    with pytest.raises(ClientError):
        wait_for_state(
            describe,
            lambda item: True,
            "vol-1",
            "available",
            WaitSettings(timeout_seconds=60),
        )

    mock_time.sleep.assert_not_called()
