#!/usr/bin/env python3
"""
Review every EBS volume in a region and move it to a cheaper volume type.

Unattached volumes smaller than 125 GiB go from gp2 to gp3, unattached volumes
of 125 GiB or more go to sc1, and attached gp2 volumes go to gp3 outside the
production environment. Snapshots before modification are optional.

This is a thin wrapper around the ebs_optimizer package.
"""
from __future__ import annotations

from ebs_optimizer.cli import main

if __name__ == "__main__":  # pragma: no cover - script entry point
    raise SystemExit(main())
