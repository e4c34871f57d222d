#!/usr/bin/env python3
"""
Regional boto3 clients for EC2 and Service Quotas.

Credentials come from a dotenv file (``AWS_ENV_FILE``, else ``~/.env``). When
that file has no keys, boto3 resolves credentials itself (instance role,
profile, SSO).
"""

import logging
import os
from pathlib import Path
from typing import Dict, Optional

import boto3
from botocore.config import Config
from dotenv import load_dotenv

from ebs_optimizer.config import SDK_MAX_ATTEMPTS

EC2_SERVICE = "ec2"
SERVICE_QUOTAS_SERVICE = "service-quotas"


def _resolve_env_path(env_path: Optional[str] = None) -> str:
    """Pick the dotenv file: explicit argument, then AWS_ENV_FILE, then ~/.env."""
    return env_path or os.environ.get("AWS_ENV_FILE") or str(Path.home() / ".env")


def load_credentials_from_env(env_path: Optional[str] = None) -> tuple[str, str]:
    """
    Read the access key pair from the dotenv file.

    Returns:
        tuple: (access key id, secret access key)

    Raises:
        ValueError: If either key is missing after loading the file
    """
    source = _resolve_env_path(env_path)
    load_dotenv(source)

    key_id = os.getenv("AWS_ACCESS_KEY_ID")
    secret = os.getenv("AWS_SECRET_ACCESS_KEY")
    if not (key_id and secret):
        raise ValueError(f"AWS credentials not found in {source}")

    logging.debug("Using AWS access key pair from %s", source)
    return key_id, secret


def _credential_kwargs(key_id: Optional[str], secret: Optional[str]) -> Dict[str, str]:
    if key_id is None or secret is None:
        try:
            key_id, secret = load_credentials_from_env()
        except ValueError as e:
            logging.debug("%s; falling back to the default boto3 credential chain", e)
            return {}

    credentials = {"aws_access_key_id": key_id, "aws_secret_access_key": secret}
    session_token = os.getenv("AWS_SESSION_TOKEN")
    if session_token:
        credentials["aws_session_token"] = session_token
    return credentials


def create_client(
    service_name: str,
    region: str,
    aws_access_key_id: Optional[str] = None,
    aws_secret_access_key: Optional[str] = None,
):
    """
    Build a boto3 client for one region with botocore standard retries.

    Args:
        service_name: boto3 service name, e.g. 'ec2' or 'service-quotas'
        region: Region every call of the run targets
        aws_access_key_id: Access key; read from the dotenv file when omitted
        aws_secret_access_key: Secret key; read from the dotenv file when omitted
    """
    sdk_config = Config(retries={"max_attempts": SDK_MAX_ATTEMPTS, "mode": "standard"})
    return boto3.client(
        service_name,
        region_name=region,
        config=sdk_config,
        **_credential_kwargs(aws_access_key_id, aws_secret_access_key),
    )


def create_ec2_client(region: str, aws_access_key_id=None, aws_secret_access_key=None):
    """EC2 client used for volumes, tags and snapshots."""
    return create_client(EC2_SERVICE, region, aws_access_key_id, aws_secret_access_key)


def create_service_quotas_client(region: str, aws_access_key_id=None, aws_secret_access_key=None):
    """Service Quotas client; EBS storage quotas are regional."""
    return create_client(
        SERVICE_QUOTAS_SERVICE, region, aws_access_key_id, aws_secret_access_key
    )
