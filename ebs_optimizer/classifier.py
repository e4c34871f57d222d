"""
Volume inventory and the rules that decide which volumes change type.

The rules are pure functions over a freshly fetched inventory. Each stage
queries AWS again, so a volume modified by an earlier stage already shows its
new type and drops out of later ones.
"""

from dataclasses import dataclass
from typing import Callable, List

from ebs_optimizer.common.aws_common import paginate
from ebs_optimizer.config import (
    GP2,
    GP3,
    SC1,
    SIZE_THRESHOLD_GIB,
    STATE_AVAILABLE,
    STATE_IN_USE,
)


@dataclass(frozen=True)
class Volume:
    """An EBS volume as reported by describe_volumes."""

    volume_id: str
    size_gib: int
    volume_type: str
    state: str

    @classmethod
    def from_api(cls, volume: dict) -> "Volume":
        """Build a Volume from a describe_volumes entry."""
        return cls(
            volume_id=volume["VolumeId"],
            size_gib=int(volume["Size"]),
            volume_type=volume["VolumeType"],
            state=volume["State"],
        )


def _is_unattached_small_gp2(volume: Volume) -> bool:
    return (
        volume.state == STATE_AVAILABLE
        and volume.size_gib < SIZE_THRESHOLD_GIB
        and volume.volume_type == GP2
    )


def _is_unattached_large(volume: Volume) -> bool:
    return (
        volume.state == STATE_AVAILABLE
        and volume.size_gib >= SIZE_THRESHOLD_GIB
        and volume.volume_type != SC1
    )


def _is_attached_gp2(volume: Volume) -> bool:
    return volume.state == STATE_IN_USE and volume.volume_type == GP2


@dataclass(frozen=True)
class Stage:
    """One classification rule and how its volumes are migrated."""

    name: str
    attachment_state: str
    target_type: str
    wait_for_stable: bool
    predicate: Callable[[Volume], bool]
    title: str

    def matches(self, volume: Volume) -> bool:
        """Return True when the volume belongs to this stage's bucket."""
        return self.predicate(volume)


UNATTACHED_SMALL = Stage(
    name="unattached-small",
    attachment_state=STATE_AVAILABLE,
    target_type=GP3,
    wait_for_stable=True,
    predicate=_is_unattached_small_gp2,
    title=f"Unattached gp2 volumes smaller than {SIZE_THRESHOLD_GIB} GiB to gp3",
)

UNATTACHED_LARGE = Stage(
    name="unattached-large",
    attachment_state=STATE_AVAILABLE,
    target_type=SC1,
    wait_for_stable=True,
    predicate=_is_unattached_large,
    title=f"Unattached volumes of {SIZE_THRESHOLD_GIB} GiB or more to sc1",
)

# Waiting for "available" on an in-use volume would never finish
ATTACHED = Stage(
    name="attached",
    attachment_state=STATE_IN_USE,
    target_type=GP3,
    wait_for_stable=False,
    predicate=_is_attached_gp2,
    title="Attached (in-use) gp2 volumes to gp3",
)

STAGES = (UNATTACHED_SMALL, UNATTACHED_LARGE, ATTACHED)


def list_volumes(ec2_client, attachment_state: str) -> List[Volume]:
    """Fetch every volume in the given attachment state."""
    volumes = paginate(
        ec2_client,
        "describe_volumes",
        "Volumes",
        Filters=[{"Name": "status", "Values": [attachment_state]}],
    )
    return [Volume.from_api(volume) for volume in volumes]


def select(volumes: List[Volume], stage: Stage) -> List[Volume]:
    """Return the volumes matching a stage, preserving inventory order."""
    return [volume for volume in volumes if stage.matches(volume)]


def classify(volumes: List[Volume], stage: Stage) -> List[str]:
    """Return the ids of the volumes matching a stage."""
    return [volume.volume_id for volume in select(volumes, stage)]
