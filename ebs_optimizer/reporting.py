"""
EBS Optimizer Reporting Module
Handles console output for stages and the end-of-run summary, plus the JSON summary file.
"""

import json
from dataclasses import asdict
from pathlib import Path


def print_stage_header(stage) -> None:
    """Announce a migration stage."""
    print()
    print(stage.title)
    print("-" * 50)


def print_inventory_table(volumes) -> None:
    """Print the inventory fetched for a stage."""
    if not volumes:
        print("   (no volumes in this attachment state)")
        return
    print(f"   {'Volume ID':<24} {'Type':<10} {'Size (GiB)':>10}  State")
    for volume in volumes:
        print(
            f"   {volume.volume_id:<24} {volume.volume_type:<10} "
            f"{volume.size_gib:>10}  {volume.state}"
        )


def print_run_summary(summary) -> None:
    """
    Print the end-of-run summary.

    Args:
        summary: RunSummary returned by runner.run
    """
    print()
    print("EBS COST OPTIMIZATION SUMMARY")
    print("=" * 50)
    print(f"Region: {summary.region}")
    print(f"Environment: {summary.environment}")
    print(f"Backup snapshots: {'enabled' if summary.backup else 'disabled'}")

    if summary.quota is not None:
        print(
            f"Storage quotas: gp2 {summary.quota.gp2_limit:g} TiB, "
            f"gp3 {summary.quota.gp3_limit:g} TiB"
        )
    if summary.error:
        print(f"Run aborted: {summary.error}")
        return

    if summary.sweep is not None:
        print(
            f"Expired snapshots deleted: {len(summary.sweep.deleted)} "
            f"(cutoff {summary.sweep.cutoff.isoformat()})"
        )
        if summary.sweep.failed:
            print(f"Snapshot deletions failed: {len(summary.sweep.failed)}")

    migrations = summary.migrations
    succeeded = [result for result in migrations if result.succeeded]
    print(f"Volumes modified: {len(succeeded)}")
    if summary.attached_skipped:
        print("Attached volumes: skipped (production environment)")

    total_savings = sum(result.estimated_monthly_savings for result in succeeded)
    print(f"Estimated monthly savings: ${total_savings:.2f}")
    print(f"Estimated annual savings: ${total_savings * 12:.2f}")

    failures = summary.failures
    if failures:
        print()
        print(f"Failed volumes: {len(failures)}")
        for result in failures:
            print(
                f"  {result.volume_id} ({result.source_type} -> {result.target_type}): "
                f"{result.error}"
            )


def build_summary_document(summary) -> dict:
    """Build the JSON-serializable form of a RunSummary."""
    document = {
        "region": summary.region,
        "environment": summary.environment,
        "backup": summary.backup,
        "exit_code": summary.exit_code,
        "error": summary.error,
        "quota": asdict(summary.quota) if summary.quota is not None else None,
        "attached_skipped": summary.attached_skipped,
        "sweep": None,
        "stages": {
            stage: [asdict(result) for result in results]
            for stage, results in summary.results.items()
        },
    }
    if summary.sweep is not None:
        document["sweep"] = {
            "cutoff": summary.sweep.cutoff.isoformat(),
            "deleted": list(summary.sweep.deleted),
            "failed": dict(summary.sweep.failed),
            "freed_monthly_cost": round(summary.sweep.freed_monthly_cost, 2),
        }
    return document


def write_json_summary(summary, path) -> Path:
    """Write the run summary as JSON and return the path written."""
    output_path = Path(path).expanduser()
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(build_summary_document(summary), indent=2) + "\n")
    return output_path
