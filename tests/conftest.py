"""Global pytest configuration.

Unit tests run from the project root; make `ossfs_core` importable without an
editable install and provide the shared in-memory client fixtures.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest


def pytest_configure() -> None:
    root_dir = Path(__file__).resolve().parents[1]

    raw = str(root_dir)
    if raw not in sys.path:
        sys.path.insert(0, raw)


@pytest.fixture
def client_config():
    from ossfs_core.settings import OssClientConfig

    return OssClientConfig(key="ak", secret="sk", endpoint="oss-cn-hangzhou.aliyuncs.com")


@pytest.fixture
def memory_client():
    from ossfs_core.testing.memory_client import MemoryOssClient

    return MemoryOssClient()


@pytest.fixture
def adapter(client_config, memory_client):
    from ossfs_core.adapter import OssAdapter

    return OssAdapter(client_config, "bucket", client=memory_client)
