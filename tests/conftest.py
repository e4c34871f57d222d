"""Shared pytest fixtures for the EBS optimizer tests."""

from __future__ import annotations

from datetime import date
from unittest.mock import MagicMock

import pytest

from ebs_optimizer.common.waiter_utils import WaitPolicy, WaitSettings
from tests.fake_aws import FakeEC2, FakeServiceQuotas


class _StubBotoClient:
    """Stub returned by boto3.client so no test ever reaches AWS."""

    def __init__(self, service_name: str, **kwargs):
        self.service_name = service_name
        self.region_name = kwargs.get("region_name")

    def __getattr__(self, name: str):
        raise AssertionError(f"Unexpected AWS call {self.service_name}.{name} in tests")


@pytest.fixture(autouse=True)
def stub_boto3_client(monkeypatch):
    """Replace boto3.client with a stub so tests don't call real AWS."""

    def fake_client(service_name, **kwargs):
        return _StubBotoClient(service_name, **kwargs)

    monkeypatch.setattr("boto3.client", fake_client)


@pytest.fixture(autouse=True)
def mock_aws_env_file(tmp_path, monkeypatch):
    """Point AWS_ENV_FILE at a temporary .env holding fake credentials."""
    env_file = tmp_path / ".env"
    env_file.write_text("AWS_ACCESS_KEY_ID=test_key\nAWS_SECRET_ACCESS_KEY=test_secret\n")
    monkeypatch.setenv("AWS_ENV_FILE", str(env_file))
    for key in ("AWS_ACCESS_KEY_ID", "AWS_SECRET_ACCESS_KEY", "AWS_SESSION_TOKEN"):
        # setenv first so monkeypatch restores the original value afterwards
        monkeypatch.setenv(key, "placeholder")
        monkeypatch.delenv(key)
    yield str(env_file)


@pytest.fixture
def run_date():
    """Fixed run date used across snapshot and runner tests."""
    return date(2024, 6, 15)


@pytest.fixture
def fast_wait_policy():
    """Wait policy with no delay between polls."""
    settings = WaitSettings(timeout_seconds=60, initial_delay=0, max_delay=0)
    return WaitPolicy(snapshot=settings, volume=settings)


@pytest.fixture
def quotas_ok():
    """Service Quotas double where gp3 quota covers gp2."""
    return FakeServiceQuotas({"L-D18FCD1D": 50.0, "L-7A658B76": 50.0})


@pytest.fixture
def quotas_insufficient():
    """Service Quotas double where gp2 quota exceeds gp3."""
    return FakeServiceQuotas({"L-D18FCD1D": 300.0, "L-7A658B76": 50.0})


@pytest.fixture
def fake_ec2():
    """Empty stateful EC2 double."""
    return FakeEC2()


@pytest.fixture
def mock_time(monkeypatch):
    """Patch the time module used by the waiters; monotonic time never advances."""
    fake_time = MagicMock()
    fake_time.monotonic.return_value = 0.0
    monkeypatch.setattr("ebs_optimizer.common.waiter_utils.time", fake_time)
    return fake_time
