"""
Configuration for the EBS cost optimizer.

Volume type rules:
- Unattached gp2 volumes below SIZE_THRESHOLD_GIB move to gp3
- Unattached volumes at or above SIZE_THRESHOLD_GIB move to sc1 (any source type but sc1)
- Attached gp2 volumes move to gp3 outside the production environment

Protective snapshots carry MARKER_TAG and are deleted after SNAPSHOT_RETENTION_DAYS.
"""

# Volume types
GP2: str = "gp2"
GP3: str = "gp3"
SC1: str = "sc1"

# Attachment states reported by describe_volumes
STATE_AVAILABLE: str = "available"
STATE_IN_USE: str = "in-use"

# Size boundary between the gp3 and sc1 rules for unattached volumes
SIZE_THRESHOLD_GIB: int = 125

# Environment name that disables attached volume modification
PRODUCTION_ENVIRONMENT: str = "production"

# Backup modes accepted on the command line
BACKUP_MODE: str = "backup"
NO_BACKUP_MODE: str = "nobackup"

# Snapshot marker tag; the sweep only ever touches snapshots carrying it
MARKER_TAG_KEY: str = "automation-control"
MARKER_TAG_VALUE: str = "ebs-cost-governance"
VOLUME_ID_TAG_KEY: str = "volume-id"
SNAPSHOT_RETENTION_DAYS: int = 7
SNAPSHOT_DESCRIPTION_TEMPLATE: str = "Created by EBS Cost Optimization script on {date}"

# Service Quotas codes for EBS storage (TiB)
QUOTA_SERVICE_CODE: str = "ebs"
GP2_STORAGE_QUOTA_CODE: str = "L-D18FCD1D"
GP3_STORAGE_QUOTA_CODE: str = "L-7A658B76"

# Polling: delay doubles from the initial value up to the cap until the timeout
SNAPSHOT_WAIT_TIMEOUT_SECONDS: int = 6 * 60 * 60
VOLUME_WAIT_TIMEOUT_SECONDS: int = 30 * 60
POLL_INITIAL_DELAY_SECONDS: float = 5.0
POLL_MAX_DELAY_SECONDS: float = 60.0

# Retry for individual mutation calls (outer layer, on top of the SDK retries)
MAX_CALL_ATTEMPTS: int = 3
RETRY_BASE_DELAY_SECONDS: float = 2.0
RETRY_MAX_DELAY_SECONDS: float = 60.0
RETRYABLE_ERROR_CODES: frozenset = frozenset(
    {
        "Throttling",
        "ThrottlingException",
        "RequestLimitExceeded",
        "ServiceUnavailable",
        "InternalError",
    }
)

# botocore standard retry mode attempts (applies to every call, including reads)
SDK_MAX_ATTEMPTS: int = 3

# The two layers multiply: worst case number of requests for one mutation
MAX_REQUESTS_PER_MUTATION: int = MAX_CALL_ATTEMPTS * SDK_MAX_ATTEMPTS

# Returned by describe calls while a just-created resource is not yet visible;
# waiters keep polling on these until their deadline
NOT_YET_VISIBLE_ERROR_CODES: frozenset = frozenset(
    {"InvalidSnapshot.NotFound", "InvalidVolume.NotFound"}
)
