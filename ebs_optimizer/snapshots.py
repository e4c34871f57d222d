"""
Protective snapshot creation and retention sweep.

Snapshots created here carry the automation marker tag. The sweep selects on
that tag alone, so snapshots created by anything else are never deleted.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, List

from botocore.exceptions import ClientError

from ebs_optimizer.common.aws_common import paginate, to_tag_list
from ebs_optimizer.common.cost_utils import calculate_snapshot_cost
from ebs_optimizer.common.retry_utils import call_with_retry, get_error_code
from ebs_optimizer.common.waiter_utils import WaitSettings, wait_snapshot_completed
from ebs_optimizer.config import (
    MARKER_TAG_KEY,
    MARKER_TAG_VALUE,
    SNAPSHOT_DESCRIPTION_TEMPLATE,
    SNAPSHOT_RETENTION_DAYS,
    VOLUME_ID_TAG_KEY,
)

# EC2 rejects user-supplied tag keys in the reserved aws: namespace
RESERVED_TAG_PREFIX = "aws:"


@dataclass
class SweepResult:
    """Snapshots removed (or not) by one retention sweep."""

    cutoff: date
    deleted: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)
    freed_monthly_cost: float = 0.0


def get_volume_tags(ec2_client, volume_id: str) -> Dict[str, str]:
    """Return every tag currently attached to a volume."""
    tags = paginate(
        ec2_client,
        "describe_tags",
        "Tags",
        Filters=[{"Name": "resource-id", "Values": [volume_id]}],
    )
    return {tag["Key"]: tag["Value"] for tag in tags}


def build_snapshot_tags(volume_tags: Dict[str, str], volume_id: str) -> Dict[str, str]:
    """
    Build the tag set for a protective snapshot.

    Copies the volume tags (minus reserved aws: keys) and adds the source volume
    id and the automation marker. The marker always wins over a volume tag of
    the same key.
    """
    snapshot_tags = {
        key: value
        for key, value in volume_tags.items()
        if not key.startswith(RESERVED_TAG_PREFIX)
    }
    snapshot_tags[VOLUME_ID_TAG_KEY] = volume_id
    snapshot_tags[MARKER_TAG_KEY] = MARKER_TAG_VALUE
    return snapshot_tags


def create_protective_snapshot(
    ec2_client, volume_id: str, run_date: date, settings: WaitSettings
) -> str:
    """
    Snapshot a volume and block until the snapshot is completed.

    Args:
        ec2_client: Boto3 EC2 client for the run's region
        volume_id: Volume about to be modified
        run_date: Date embedded in the snapshot description
        settings: Deadline and backoff for the completion wait

    Returns:
        str: The snapshot id

    Raises:
        ClientError: If tagging lookup or snapshot creation fails
        SnapshotFailedError: If the snapshot ends in the error state
        WaitTimeoutError: If the snapshot does not complete in time
    """
    print(f"Preparing volume {volume_id} snapshot for restore cases.")
    print(f"Creating restore and automation tags for {volume_id} volume snapshot.")
    snapshot_tags = build_snapshot_tags(get_volume_tags(ec2_client, volume_id), volume_id)

    print(f"Creating {volume_id} volume snapshot.")
    response = call_with_retry(
        ec2_client.create_snapshot,
        VolumeId=volume_id,
        Description=SNAPSHOT_DESCRIPTION_TEMPLATE.format(date=run_date.isoformat()),
        TagSpecifications=[{"ResourceType": "snapshot", "Tags": to_tag_list(snapshot_tags)}],
    )
    snapshot_id = response["SnapshotId"]
    logging.info("Snapshot %s requested for volume %s", snapshot_id, volume_id)

    wait_snapshot_completed(ec2_client, snapshot_id, volume_id, settings)
    return snapshot_id


def find_expired_snapshots(ec2_client, cutoff: date) -> List[dict]:
    """Return marker-tagged snapshots owned by this account started on or before ``cutoff``."""
    snapshots = paginate(
        ec2_client,
        "describe_snapshots",
        "Snapshots",
        OwnerIds=["self"],
        Filters=[{"Name": f"tag:{MARKER_TAG_KEY}", "Values": [MARKER_TAG_VALUE]}],
    )
    return [snapshot for snapshot in snapshots if snapshot["StartTime"].date() <= cutoff]


def sweep_expired_snapshots(
    ec2_client, run_date: date, retention_days: int = SNAPSHOT_RETENTION_DAYS
) -> SweepResult:
    """
    Delete automation snapshots older than the retention window.

    The cutoff is ``run_date`` (a UTC calendar day, like snapshot StartTime
    dates) minus ``retention_days``. Each deletion is independent: a failure is recorded and the
    sweep moves on. Snapshots that vanished in the meantime are skipped.
    """
    result = SweepResult(cutoff=run_date - timedelta(days=retention_days))
    expired = find_expired_snapshots(ec2_client, result.cutoff)
    if not expired:
        print("Nothing to delete. No outdated snapshots.")
        return result

    snapshot_ids = [snapshot["SnapshotId"] for snapshot in expired]
    print(f"List of snapshots to delete: {' '.join(snapshot_ids)}")
    for snapshot in expired:
        snapshot_id = snapshot["SnapshotId"]
        try:
            call_with_retry(ec2_client.delete_snapshot, SnapshotId=snapshot_id)
        except ClientError as e:
            if get_error_code(e) == "InvalidSnapshot.NotFound":
                logging.info("Snapshot %s already deleted", snapshot_id)
                continue
            logging.error("Failed to delete snapshot %s: %s", snapshot_id, e)
            result.failed[snapshot_id] = str(e)
            continue
        print(f"Deleted snapshot {snapshot_id}")
        result.deleted.append(snapshot_id)
        result.freed_monthly_cost += calculate_snapshot_cost(snapshot.get("VolumeSize", 0))

    return result
