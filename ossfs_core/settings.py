"""Adapter configuration (env-first, YAML for disk files)."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

DEFAULT_TIMEOUT = 5184000
DEFAULT_CONNECT_TIMEOUT = 10
DEFAULT_MAX_RETRIES = 3
DEFAULT_REGION = "us-east-1"


@dataclass(frozen=True)
class OssClientConfig:
    """Transport settings for the object-storage client."""

    key: str
    secret: str
    endpoint: str
    is_cname: bool = False
    security_token: str | None = None
    request_proxy: str | None = None
    ssl: bool = False
    timeout: int = DEFAULT_TIMEOUT
    connect_timeout: int = DEFAULT_CONNECT_TIMEOUT
    max_retries: int = DEFAULT_MAX_RETRIES
    region: str = DEFAULT_REGION


@dataclass(frozen=True)
class OssDiskConfig:
    """One configured disk: bucket, key prefix, public domain and default options."""

    bucket: str
    client: OssClientConfig
    prefix: str = ""
    domain: str | None = None
    options: Mapping[str, Any] = field(default_factory=dict)


def _parse_bool(value: object, *, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in {"1", "true", "yes", "y", "on"}:
        return True
    if text in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _parse_int(name: str, value: object, default: int) -> int:
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    try:
        parsed = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{name} must be an integer, got: {value}") from exc
    if parsed < 0:
        raise ValueError(f"{name} must be >= 0, got: {parsed}")
    return parsed


def _optional_str(value: object) -> str | None:
    text = str(value or "").strip()
    return text or None


def client_config_from_mapping(raw: Mapping[str, Any]) -> OssClientConfig:
    key = _optional_str(raw.get("key"))
    secret = _optional_str(raw.get("secret"))
    endpoint = _optional_str(raw.get("endpoint"))
    if not key or not secret or not endpoint:
        raise ValueError("client key, secret, and endpoint must all be set")

    return OssClientConfig(
        key=key,
        secret=secret,
        endpoint=endpoint,
        is_cname=_parse_bool(raw.get("is_cname")),
        security_token=_optional_str(raw.get("security_token")),
        request_proxy=_optional_str(raw.get("request_proxy")),
        ssl=_parse_bool(raw.get("ssl")),
        timeout=_parse_int("timeout", raw.get("timeout"), DEFAULT_TIMEOUT),
        connect_timeout=_parse_int(
            "connect_timeout", raw.get("connect_timeout"), DEFAULT_CONNECT_TIMEOUT
        ),
        max_retries=_parse_int("max_retries", raw.get("max_retries"), DEFAULT_MAX_RETRIES),
        region=_optional_str(raw.get("region")) or DEFAULT_REGION,
    )


def disk_config_from_mapping(raw: Mapping[str, Any]) -> OssDiskConfig:
    bucket = _optional_str(raw.get("bucket"))
    if not bucket:
        raise ValueError("bucket is required")

    client = raw.get("client") or {}
    if not isinstance(client, Mapping):
        raise ValueError("client must be a mapping")
    options = raw.get("options") or {}
    if not isinstance(options, Mapping):
        raise ValueError("options must be a mapping")

    return OssDiskConfig(
        bucket=bucket,
        client=client_config_from_mapping(client),
        prefix=str(raw.get("prefix") or ""),
        domain=_optional_str(raw.get("domain")),
        options=dict(options),
    )


def resolve_oss_settings(env: Mapping[str, str] | None = None) -> OssDiskConfig:
    """Resolve a disk configuration from ``ALIYUN_OSS_*`` environment variables."""

    env = dict(os.environ) if env is None else env
    return disk_config_from_mapping(
        {
            "bucket": env.get("ALIYUN_OSS_BUCKET"),
            "domain": env.get("ALIYUN_OSS_DOMAIN"),
            "prefix": env.get("ALIYUN_OSS_PREFIX"),
            "client": {
                "key": env.get("ALIYUN_OSS_ACCESS_KEY_ID"),
                "secret": env.get("ALIYUN_OSS_ACCESS_KEY_SECRET"),
                "endpoint": env.get("ALIYUN_OSS_ENDPOINT"),
                "is_cname": env.get("ALIYUN_OSS_IS_CNAME"),
                "security_token": env.get("ALIYUN_OSS_SECURITY_TOKEN"),
                "request_proxy": env.get("ALIYUN_OSS_REQUEST_PROXY"),
                "ssl": env.get("ALIYUN_OSS_SSL"),
                "timeout": env.get("ALIYUN_OSS_TIMEOUT"),
                "connect_timeout": env.get("ALIYUN_OSS_CONNECT_TIMEOUT"),
                "max_retries": env.get("ALIYUN_OSS_MAX_RETRIES"),
                "region": env.get("ALIYUN_OSS_REGION"),
            },
        }
    )


def load_disk_config(path: str | Path, disk: str = "oss") -> OssDiskConfig:
    """Load one disk from a YAML file shaped like ``disks: {<disk>: {...}}``."""

    with open(path, encoding="utf-8") as f:
        payload = yaml.safe_load(f) or {}
    if not isinstance(payload, Mapping):
        raise ValueError(f"{path} must contain a mapping")

    disks = payload.get("disks") or {}
    if not isinstance(disks, Mapping) or disk not in disks:
        raise ValueError(f"disk '{disk}' not found in {path}")
    raw = disks[disk]
    if not isinstance(raw, Mapping):
        raise ValueError(f"disk '{disk}' must be a mapping")
    return disk_config_from_mapping(raw)
