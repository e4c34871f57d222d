"""
EBS cost estimates used to report the savings of each volume type change.

Prices are storage-only list prices per GB-month for us-east-1 and vary by
region, so the figures are indicative.
"""

from ebs_optimizer.config import GP2, GP3, SC1

EBS_PRICE_PER_GB_MONTH = {
    GP3: 0.08,
    GP2: 0.10,
    "io1": 0.125,
    "io2": 0.125,
    "st1": 0.045,
    SC1: 0.015,
    "standard": 0.05,  # previous-generation magnetic
}

SNAPSHOT_PRICE_PER_GB_MONTH = 0.05


def calculate_ebs_storage_cost(size_gb: int, volume_type: str) -> float:
    """
    Calculate the monthly storage cost of an EBS volume.

    Raises:
        ValueError: If the volume type has no known price
    """
    if volume_type not in EBS_PRICE_PER_GB_MONTH:
        raise ValueError(
            f"Unknown volume type: {volume_type}. "
            f"Supported types: {', '.join(sorted(EBS_PRICE_PER_GB_MONTH))}"
        )
    return size_gb * EBS_PRICE_PER_GB_MONTH[volume_type]


def estimate_monthly_savings(size_gb: int, source_type: str, target_type: str) -> float:
    """
    Estimate the monthly saving of moving a volume between types.

    Unknown source types yield 0.0 so an unpriced volume never inflates the total.
    """
    if source_type not in EBS_PRICE_PER_GB_MONTH:
        return 0.0
    return calculate_ebs_storage_cost(size_gb, source_type) - calculate_ebs_storage_cost(
        size_gb, target_type
    )


def calculate_snapshot_cost(size_gb: int) -> float:
    """Calculate the monthly cost of a full EBS snapshot of ``size_gb``."""
    return size_gb * SNAPSHOT_PRICE_PER_GB_MONTH
