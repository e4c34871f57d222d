"""Tests for ebs_optimizer/reporting.py"""

from __future__ import annotations

import json
from datetime import date

from ebs_optimizer.classifier import UNATTACHED_SMALL, Volume
from ebs_optimizer.migration import MigrationResult
from ebs_optimizer.quota import QuotaDecision
from ebs_optimizer.reporting import (
    build_summary_document,
    print_inventory_table,
    print_run_summary,
    print_stage_header,
    write_json_summary,
)
from ebs_optimizer.runner import RunSummary
from ebs_optimizer.snapshots import SweepResult
from tests.assertions import assert_equal


def _summary():
    summary = RunSummary(
        region="us-west-2",
        backup=True,
        environment="staging",
        quota=QuotaDecision(gp2_limit=50.0, gp3_limit=50.0),
        sweep=SweepResult(cutoff=date(2024, 6, 8), deleted=["snap-old"], freed_monthly_cost=0.5),
    )
    summary.results["unattached-small"] = [
        MigrationResult(
            "vol-a", "unattached-small", "gp2", "gp3", 100,
            snapshot_id="snap-0001", waited=True, estimated_monthly_savings=2.0,
        ),
        MigrationResult(
            "vol-b", "unattached-small", "gp2", "gp3", 20, error="InvalidVolume.NotFound"
        ),
    ]
    return summary


def test_print_stage_header(capsys):
    """Test the stage title is printed with an underline."""
    print_stage_header(UNATTACHED_SMALL)

    output = capsys.readouterr().out
    assert UNATTACHED_SMALL.title in output
    assert "-" * 50 in output


def test_print_inventory_table(capsys):
    """Test the inventory table lists each volume."""
    print_inventory_table([Volume("vol-a", 100, "gp2", "available")])

    output = capsys.readouterr().out
    assert "Volume ID" in output
    assert "vol-a" in output
    assert "available" in output


def test_print_inventory_table_empty(capsys):
    """Test an empty inventory prints a placeholder line."""
    print_inventory_table([])

    assert "no volumes" in capsys.readouterr().out


def test_print_run_summary(capsys):
    """Test the summary reports counts, savings and failures."""
    print_run_summary(_summary())

    output = capsys.readouterr().out
    assert "EBS COST OPTIMIZATION SUMMARY" in output
    assert "Backup snapshots: enabled" in output
    assert "Expired snapshots deleted: 1 (cutoff 2024-06-08)" in output
    assert "Volumes modified: 1" in output
    assert "Estimated monthly savings: $2.00" in output
    assert "Estimated annual savings: $24.00" in output
    assert "Failed volumes: 1" in output
    assert "vol-b (gp2 -> gp3): InvalidVolume.NotFound" in output


def test_print_run_summary_aborted(capsys):
    """Test an aborted run stops after the quota line."""
    summary = RunSummary(
        region="us-east-1",
        backup=False,
        environment="production",
        quota=QuotaDecision(gp2_limit=300.0, gp3_limit=50.0),
        error="gp2 storage quota 300 TiB exceeds gp3 storage quota 50 TiB",
        exit_code=1,
    )

    print_run_summary(summary)

    output = capsys.readouterr().out
    assert "Storage quotas: gp2 300 TiB, gp3 50 TiB" in output
    assert "Run aborted:" in output
    assert "Volumes modified" not in output


def test_build_summary_document():
    """Test the JSON document carries per-stage results and the sweep."""
    document = build_summary_document(_summary())

    assert_equal(document["region"], "us-west-2")
    assert_equal(document["quota"], {"gp2_limit": 50.0, "gp3_limit": 50.0})
    assert_equal(document["sweep"]["cutoff"], "2024-06-08")
    assert_equal(document["sweep"]["deleted"], ["snap-old"])
    stage_results = document["stages"]["unattached-small"]
    assert_equal([entry["volume_id"] for entry in stage_results], ["vol-a", "vol-b"])
    assert_equal(stage_results[0]["snapshot_id"], "snap-0001")


def test_write_json_summary(tmp_path):
    """Test the summary is written as parseable JSON, creating parent directories."""
    output_path = write_json_summary(_summary(), tmp_path / "reports" / "run.json")

    assert_equal(output_path, tmp_path / "reports" / "run.json")
    document = json.loads(output_path.read_text())
    assert_equal(document["environment"], "staging")
    assert_equal(document["stages"]["unattached-small"][1]["error"], "InvalidVolume.NotFound")
