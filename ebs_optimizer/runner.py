"""
Run controller for one optimizer invocation.

Pipeline (strictly sequential, no stage is revisited):
1. Quota check (failure ends the run with exit code 1, before any EC2 call)
2. Expired snapshot sweep
3. Unattached gp2 volumes below the size threshold to gp3
4. Unattached volumes at or above the size threshold to sc1
5. Environment gate: production skips step 6 and ends the run successfully
6. Attached gp2 volumes to gp3

Every migration stage re-reads the inventory from AWS.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional

from ebs_optimizer.classifier import (
    ATTACHED,
    UNATTACHED_LARGE,
    UNATTACHED_SMALL,
    Stage,
    list_volumes,
    select,
)
from ebs_optimizer.common.waiter_utils import WaitPolicy
from ebs_optimizer.config import PRODUCTION_ENVIRONMENT
from ebs_optimizer.exceptions import QuotaLookupError
from ebs_optimizer.migration import MigrationResult, migrate_bucket
from ebs_optimizer.quota import QuotaDecision, check_quota
from ebs_optimizer.reporting import print_inventory_table, print_stage_header
from ebs_optimizer.snapshots import SweepResult, sweep_expired_snapshots

EXIT_SUCCESS = 0
EXIT_PRECONDITION_FAILED = 1
EXIT_COMPLETED_WITH_ERRORS = 2


@dataclass(frozen=True)
class RunOptions:  # pylint: disable=too-many-instance-attributes
    """Inputs of one run."""

    region: str
    backup: bool
    environment: str
    run_date: date
    wait_policy: WaitPolicy = WaitPolicy()
    strict: bool = False
    show_inventory: bool = False

    @property
    def is_production(self) -> bool:
        """True when attached volumes must be left alone."""
        return self.environment == PRODUCTION_ENVIRONMENT


@dataclass
class RunSummary:  # pylint: disable=too-many-instance-attributes
    """Everything one run decided and did."""

    region: str
    backup: bool
    environment: str
    quota: Optional[QuotaDecision] = None
    sweep: Optional[SweepResult] = None
    results: Dict[str, List[MigrationResult]] = field(default_factory=dict)
    attached_skipped: bool = False
    error: Optional[str] = None
    exit_code: int = EXIT_SUCCESS

    @property
    def migrations(self) -> List[MigrationResult]:
        """All per-volume results in pipeline order."""
        return [result for stage_results in self.results.values() for result in stage_results]

    @property
    def failures(self) -> List[MigrationResult]:
        """Per-volume results that ended in an error."""
        return [result for result in self.migrations if not result.succeeded]


def _run_stage(ec2_client, stage: Stage, options: RunOptions, summary: RunSummary) -> None:
    print_stage_header(stage)
    volumes = list_volumes(ec2_client, stage.attachment_state)
    if options.show_inventory:
        print_inventory_table(volumes)
    summary.results[stage.name] = migrate_bucket(
        ec2_client,
        select(volumes, stage),
        stage,
        options.backup,
        options.run_date,
        options.wait_policy,
    )


def _final_exit_code(options: RunOptions, summary: RunSummary) -> int:
    if options.strict and summary.failures:
        return EXIT_COMPLETED_WITH_ERRORS
    return EXIT_SUCCESS


def run(options: RunOptions, ec2_client, quotas_client) -> RunSummary:
    """
    Execute the full pipeline for one region.

    Args:
        options: Region, backup mode, environment and tunables
        ec2_client: Boto3 EC2 client for ``options.region``
        quotas_client: Boto3 Service Quotas client for ``options.region``

    Returns:
        RunSummary whose ``exit_code`` is the process exit status
    """
    summary = RunSummary(
        region=options.region, backup=options.backup, environment=options.environment
    )

    try:
        summary.quota = check_quota(quotas_client)
    except QuotaLookupError as e:
        print(f"Unable to verify EBS storage quotas: {e}")
        summary.error = str(e)
        summary.exit_code = EXIT_PRECONDITION_FAILED
        return summary

    if not summary.quota.proceed:
        print(
            "Please increase service quotas for storage for gp3 volumes first. "
            "Modification can be failed because of existing limits."
        )
        summary.error = (
            f"gp2 storage quota {summary.quota.gp2_limit:g} TiB exceeds "
            f"gp3 storage quota {summary.quota.gp3_limit:g} TiB"
        )
        summary.exit_code = EXIT_PRECONDITION_FAILED
        return summary

    summary.sweep = sweep_expired_snapshots(ec2_client, options.run_date)

    _run_stage(ec2_client, UNATTACHED_SMALL, options, summary)
    _run_stage(ec2_client, UNATTACHED_LARGE, options, summary)

    if options.is_production:
        print(
            "Skipping gp2 to gp3 volume modification for attached (in-use) gp2 EBS volumes "
            "on production environment."
        )
        summary.attached_skipped = True
    else:
        _run_stage(ec2_client, ATTACHED, options, summary)

    summary.exit_code = _final_exit_code(options, summary)
    return summary
