"""
Central configuration constants and logging setup
"""

import logging

# Pseudo-region for account-wide resources such as IAM
GLOBAL_REGION = "global"

DEFAULT_REGION = "us-east-1"
DEFAULT_GOVCLOUD_REGION = "us-gov-west-1"

# Fan-out limit per iteration level inside one check
DEFAULT_MAX_CONCURRENCY = 10

# Checks run side by side by the scan engine
DEFAULT_MAX_WORKERS = 5

ENV_PREFIX = "CLOUD_POSTURE_"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(verbose: bool = False):
    """Configure root logging for a scan run"""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT)

    # Reduce noise from the AWS SDK
    logging.getLogger('boto3').setLevel(logging.WARNING)
    logging.getLogger('botocore').setLevel(logging.WARNING)
    logging.getLogger('urllib3').setLevel(logging.WARNING)
