"""
Command-line interface for the EBS cost optimizer.

Usage: ebs-cost-optimizer <region> <backup|nobackup> <environment> [options]
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import date, datetime, timezone

from botocore.exceptions import BotoCoreError, ClientError

from ebs_optimizer.common.aws_client_factory import (
    create_ec2_client,
    create_service_quotas_client,
)
from ebs_optimizer.common.waiter_utils import WaitPolicy, WaitSettings
from ebs_optimizer.config import (
    BACKUP_MODE,
    NO_BACKUP_MODE,
    PRODUCTION_ENVIRONMENT,
    SNAPSHOT_WAIT_TIMEOUT_SECONDS,
    VOLUME_WAIT_TIMEOUT_SECONDS,
)
from ebs_optimizer.reporting import print_run_summary, write_json_summary
from ebs_optimizer.runner import EXIT_PRECONDITION_FAILED, RunOptions, run


def print_usage() -> None:
    """Print usage information for the script."""
    print("Missed input parameters. Set AWS region, backup/nobackup and environment first.")
    print()
    print("Usage:")
    print("  ebs-cost-optimizer <region> <backup|nobackup> <environment> [options]")
    print()
    print(f"  {BACKUP_MODE:<10} create an EBS snapshot before each volume type modification")
    print(f"  {NO_BACKUP_MODE:<10} modify volumes without snapshots")
    print(
        f"  environment  '{PRODUCTION_ENVIRONMENT}' skips gp2 to gp3 modification "
        "of attached (in-use) volumes"
    )
    print()
    print("Examples:")
    print("  ebs-cost-optimizer us-east-1 nobackup production")
    print("  ebs-cost-optimizer us-west-2 backup staging --json-summary run.json")


def parse_args(argv: list[str]) -> argparse.Namespace:
    """Parse command-line arguments; positionals are optional so missing ones can be reported."""
    parser = argparse.ArgumentParser(
        description=(
            "Move unattached and attached EBS volumes to cheaper volume types "
            "and clean up expired protective snapshots."
        ),
    )
    parser.add_argument("region", nargs="?", help="AWS region to process")
    parser.add_argument(
        "backup",
        nargs="?",
        help=(
            f"'{BACKUP_MODE}' to snapshot volumes before modification, "
            f"'{NO_BACKUP_MODE}' to skip"
        ),
    )
    parser.add_argument("environment", nargs="?", help="Environment name")
    parser.add_argument(
        "--snapshot-timeout",
        type=float,
        default=SNAPSHOT_WAIT_TIMEOUT_SECONDS,
        help=(
            "Seconds to wait for a snapshot to complete "
            f"(default: {SNAPSHOT_WAIT_TIMEOUT_SECONDS})."
        ),
    )
    parser.add_argument(
        "--volume-timeout",
        type=float,
        default=VOLUME_WAIT_TIMEOUT_SECONDS,
        help=(
            "Seconds to wait for a volume to be available "
            f"(default: {VOLUME_WAIT_TIMEOUT_SECONDS})."
        ),
    )
    parser.add_argument(
        "--json-summary",
        metavar="PATH",
        help="Write a machine-readable run summary to PATH.",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with status 2 when any volume failed to migrate.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging and print the inventory of each stage.",
    )
    return parser.parse_args(argv)


def current_run_date() -> date:
    """Today in UTC, the calendar snapshot StartTime dates are compared in."""
    return datetime.now(timezone.utc).date()


def build_run_options(args: argparse.Namespace, run_date: date) -> RunOptions:
    """Translate parsed arguments into RunOptions."""
    return RunOptions(
        region=args.region,
        backup=args.backup == BACKUP_MODE,
        environment=args.environment,
        run_date=run_date,
        wait_policy=WaitPolicy(
            snapshot=WaitSettings(args.snapshot_timeout),
            volume=WaitSettings(args.volume_timeout),
        ),
        strict=args.strict,
        show_inventory=args.verbose,
    )


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the EBS cost optimizer CLI."""
    args = parse_args(sys.argv[1:] if argv is None else argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(message)s",
    )

    if not (args.region and args.backup and args.environment):
        print_usage()
        return EXIT_PRECONDITION_FAILED
    if args.backup not in {BACKUP_MODE, NO_BACKUP_MODE}:
        print(f"Unknown backup mode: {args.backup}")
        print_usage()
        return EXIT_PRECONDITION_FAILED

    options = build_run_options(args, current_run_date())
    print("EBS Cost Optimization")
    print("=" * 50)
    print(f"Region: {options.region}  Backup: {args.backup}  Environment: {options.environment}")

    try:
        ec2_client = create_ec2_client(options.region)
        quotas_client = create_service_quotas_client(options.region)
        summary = run(options, ec2_client, quotas_client)
    except (ClientError, BotoCoreError) as e:
        logging.error("AWS request failed: %s", e)
        return EXIT_PRECONDITION_FAILED

    print_run_summary(summary)
    if args.json_summary:
        output_path = write_json_summary(summary, args.json_summary)
        print(f"Summary written to {output_path}")
    return summary.exit_code


if __name__ == "__main__":  # pragma: no cover - script entry point
    raise SystemExit(main())
