"""
Volume type migration.

Each volume is an isolated unit of work: optional protective snapshot (which
must complete first), modify_volume, then an optional wait for the volume to
be available again. A failure is recorded on that volume's result and the
rest of the bucket is still processed.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from botocore.exceptions import BotoCoreError, ClientError

from ebs_optimizer.classifier import Stage, Volume
from ebs_optimizer.common.cost_utils import estimate_monthly_savings
from ebs_optimizer.common.retry_utils import call_with_retry
from ebs_optimizer.common.waiter_utils import WaitPolicy, wait_volume_available
from ebs_optimizer.config import SNAPSHOT_RETENTION_DAYS
from ebs_optimizer.exceptions import (
    ResourceNotFoundError,
    SnapshotFailedError,
    WaitTimeoutError,
)
from ebs_optimizer.snapshots import create_protective_snapshot

# BotoCoreError covers connection and read timeouts that outlast the SDK retries
MIGRATION_ERRORS = (
    ClientError,
    BotoCoreError,
    WaitTimeoutError,
    SnapshotFailedError,
    ResourceNotFoundError,
)


@dataclass
class MigrationResult:  # pylint: disable=too-many-instance-attributes
    """What happened to one volume."""

    volume_id: str
    stage: str
    source_type: str
    target_type: str
    size_gib: int
    snapshot_id: Optional[str] = None
    waited: bool = False
    error: Optional[str] = None
    estimated_monthly_savings: float = 0.0

    @property
    def succeeded(self) -> bool:
        """True when the volume type change was requested (and awaited) without error."""
        return self.error is None


def _completion_message(result: MigrationResult) -> str:
    message = (
        f"{result.volume_id} volume has been successfully modified "
        f"to {result.target_type} volume type."
    )
    if result.snapshot_id:
        message += (
            f" Backup snapshot {result.snapshot_id} can be permanently deleted "
            f"in {SNAPSHOT_RETENTION_DAYS} days."
        )
    return message


def migrate_volume(
    ec2_client,
    volume: Volume,
    stage: Stage,
    backup: bool,
    run_date: date,
    wait_policy: WaitPolicy,
) -> MigrationResult:
    """
    Move one volume to the stage's target type.

    Args:
        ec2_client: Boto3 EC2 client for the run's region
        volume: Volume selected by the stage
        stage: Stage supplying the target type and whether to wait afterwards
        backup: Take a protective snapshot before modifying
        run_date: Date embedded in the snapshot description
        wait_policy: Deadlines for snapshot and volume waits

    Returns:
        MigrationResult with ``error`` set when any step failed
    """
    result = MigrationResult(
        volume_id=volume.volume_id,
        stage=stage.name,
        source_type=volume.volume_type,
        target_type=stage.target_type,
        size_gib=volume.size_gib,
    )
    try:
        if backup:
            result.snapshot_id = create_protective_snapshot(
                ec2_client, volume.volume_id, run_date, wait_policy.snapshot
            )
        print(
            f"Modifying {volume.volume_id} volume from {volume.volume_type} "
            f"to {stage.target_type} volume type to save costs."
        )
        call_with_retry(
            ec2_client.modify_volume, VolumeId=volume.volume_id, VolumeType=stage.target_type
        )
        if stage.wait_for_stable:
            wait_volume_available(ec2_client, volume.volume_id, wait_policy.volume)
            result.waited = True
    except MIGRATION_ERRORS as e:
        logging.error("Migration of %s to %s failed: %s", volume.volume_id, stage.target_type, e)
        result.error = str(e)
        return result

    result.estimated_monthly_savings = estimate_monthly_savings(
        volume.size_gib, volume.volume_type, stage.target_type
    )
    print(_completion_message(result))
    return result


def migrate_bucket(
    ec2_client,
    volumes: List[Volume],
    stage: Stage,
    backup: bool,
    run_date: date,
    wait_policy: WaitPolicy,
) -> List[MigrationResult]:
    """Migrate every volume of a bucket serially, continuing past individual failures."""
    if not volumes:
        print("No volumes to modify.")
        return []

    print(f"List of volumes to modify: {' '.join(volume.volume_id for volume in volumes)}")
    return [
        migrate_volume(ec2_client, volume, stage, backup, run_date, wait_policy)
        for volume in volumes
    ]
