"""Pytest configuration and fixtures."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

import pytest
import structlog

from volcsign.common.settings import Settings
from volcsign.signing.signer import Credential, Signer


@dataclass(frozen=True)
class GoldenScenario:
    """Reference signing inputs and their expected outputs."""

    access_key: str = "AKLTEXAMPLEACCESSKEY"
    secret_key: str = "ZXhhbXBsZS1zZWNyZXQta2V5"
    region: str = "cn-beijing"
    service: str = "cv"
    host: str = "visual.volcengineapi.com"
    endpoint: str = "https://visual.volcengineapi.com"
    query: dict[str, str] = field(
        default_factory=lambda: {"Action": "CVProcess", "Version": "2024-06-06"}
    )
    body: bytes = b'{"req_key":"jimeng_high_aes_general_v21_L","prompt":"test"}'
    timestamp: datetime = datetime(2024, 6, 6, 12, 0, 0, tzinfo=timezone.utc)
    amz_date: str = "20240606T120000Z"
    date_stamp: str = "20240606"

    # Computed once with OpenSSL
    payload_hash: str = "bc1f99581894ad31c36e502975430141938dd8660b4a122b624cc060cf4f3eef"
    canonical_request_hash: str = "8acfb57b2a9c95bc1267aac5da3885d9b3eb0688ed27a92ca8a91e446b9bdf48"
    signing_key_hex: str = "e6959d228e1ab221869146606073ce10b8cac324ea146e606bf4473bb5ecdab5"
    signature: str = "aa3b9e8868c7e06bdfd8489c4339123a186a0921b378b6a17b7f76e7de8b8879"

    @property
    def body_json(self) -> dict[str, Any]:
        return {"req_key": "jimeng_high_aes_general_v21_L", "prompt": "test"}


@pytest.fixture(autouse=True)
def reset_structlog():
    """Undo any structlog configuration made by a test."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def golden() -> GoldenScenario:
    """Reference signing scenario."""
    return GoldenScenario()


@pytest.fixture
def settings(golden: GoldenScenario) -> Settings:
    """Create test settings."""
    return Settings(
        _env_file=None,
        access_key=golden.access_key,
        secret_key=golden.secret_key,
        region=golden.region,
        service=golden.service,
        host=golden.host,
        endpoint=golden.endpoint,
        http_timeout=10.0,
    )


@pytest.fixture
def credential(golden: GoldenScenario) -> Credential:
    """Reference credential."""
    return Credential(golden.access_key, golden.secret_key)


@pytest.fixture
def signer(golden: GoldenScenario) -> Signer:
    """Signer for the reference host."""
    return Signer(golden.host, golden.endpoint)
