"""
EBS Cost Optimizer Package
Moves EBS volumes to cheaper volume types and manages protective snapshots
for a single AWS region.
"""

from .classifier import ATTACHED, STAGES, UNATTACHED_LARGE, UNATTACHED_SMALL, Volume, classify
from .migration import MigrationResult, migrate_bucket, migrate_volume
from .quota import QuotaDecision, check_quota
from .runner import RunOptions, RunSummary, run
from .snapshots import SweepResult, create_protective_snapshot, sweep_expired_snapshots

__all__ = [
    "ATTACHED",
    "STAGES",
    "UNATTACHED_LARGE",
    "UNATTACHED_SMALL",
    "MigrationResult",
    "QuotaDecision",
    "RunOptions",
    "RunSummary",
    "SweepResult",
    "Volume",
    "check_quota",
    "classify",
    "create_protective_snapshot",
    "migrate_bucket",
    "migrate_volume",
    "run",
    "sweep_expired_snapshots",
]
