"""
Exceptions for the EBS cost optimizer.
"""


class WaitTimeoutError(Exception):
    """Raised when a resource does not reach the expected state before the deadline"""

    def __init__(self, resource_id, expected_state, timeout_seconds):
        super().__init__(
            f"Timed out after {timeout_seconds:.0f}s waiting for {resource_id} "
            f"to become {expected_state}"
        )
        self.resource_id = resource_id
        self.expected_state = expected_state
        self.timeout_seconds = timeout_seconds


class SnapshotFailedError(Exception):
    """Raised when AWS reports a snapshot in the error state"""

    def __init__(self, snapshot_id, volume_id):
        super().__init__(f"Snapshot {snapshot_id} of volume {volume_id} failed")
        self.snapshot_id = snapshot_id
        self.volume_id = volume_id


class ResourceNotFoundError(Exception):
    """Raised when a polled resource disappears from the describe response"""

    def __init__(self, resource_id):
        super().__init__(f"Resource {resource_id} not found")
        self.resource_id = resource_id


class QuotaLookupError(Exception):
    """Raised when a service quota value cannot be read"""

    def __init__(self, quota_code, original_error):
        super().__init__(f"Unable to read service quota {quota_code}: {original_error}")
        self.quota_code = quota_code
