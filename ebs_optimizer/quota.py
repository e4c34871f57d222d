"""
EBS storage quota guard.

Bulk gp2 to gp3 modification needs at least as much gp3 storage quota as the
region allows for gp2. The check is coarse: quota is not reserved, and running
out of gp3 capacity mid-run surfaces as a modify_volume error instead.
"""

from dataclasses import dataclass

from botocore.exceptions import ClientError

from ebs_optimizer.common.retry_utils import get_error_code
from ebs_optimizer.config import (
    GP2_STORAGE_QUOTA_CODE,
    GP3_STORAGE_QUOTA_CODE,
    QUOTA_SERVICE_CODE,
)
from ebs_optimizer.exceptions import QuotaLookupError


@dataclass(frozen=True)
class QuotaDecision:
    """Outcome of the quota check."""

    gp2_limit: float
    gp3_limit: float

    @property
    def proceed(self) -> bool:
        """gp3 storage quota must be at least the gp2 one."""
        return self.gp2_limit <= self.gp3_limit


def get_quota_value(quotas_client, quota_code: str) -> float:
    """
    Read the value of an EBS service quota.

    Quotas that were never adjusted are not returned by GetServiceQuota in every
    region, so the AWS default value is used in that case.

    Raises:
        QuotaLookupError: If neither the applied nor the default value can be read
    """
    try:
        response = quotas_client.get_service_quota(
            ServiceCode=QUOTA_SERVICE_CODE, QuotaCode=quota_code
        )
    except ClientError as e:
        if get_error_code(e) != "NoSuchResourceException":
            raise QuotaLookupError(quota_code, e) from e
        try:
            response = quotas_client.get_aws_default_service_quota(
                ServiceCode=QUOTA_SERVICE_CODE, QuotaCode=quota_code
            )
        except ClientError as default_error:
            raise QuotaLookupError(quota_code, default_error) from default_error
    return float(response["Quota"]["Value"])


def check_quota(quotas_client) -> QuotaDecision:
    """Fetch the gp2 and gp3 storage quotas and decide whether migration may proceed."""
    gp2_limit = get_quota_value(quotas_client, GP2_STORAGE_QUOTA_CODE)
    gp3_limit = get_quota_value(quotas_client, GP3_STORAGE_QUOTA_CODE)
    return QuotaDecision(gp2_limit=gp2_limit, gp3_limit=gp3_limit)
