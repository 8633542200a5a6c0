from __future__ import annotations

import pytest

from ossfs_core.settings import (
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_MAX_RETRIES,
    DEFAULT_REGION,
    DEFAULT_TIMEOUT,
    client_config_from_mapping,
    disk_config_from_mapping,
    load_disk_config,
    resolve_oss_settings,
)

BASE_ENV = {
    "ALIYUN_OSS_BUCKET": "bucket",
    "ALIYUN_OSS_ACCESS_KEY_ID": "ak",
    "ALIYUN_OSS_ACCESS_KEY_SECRET": "sk",
    "ALIYUN_OSS_ENDPOINT": "oss-cn-hangzhou.aliyuncs.com",
}


def test_resolve_oss_settings_defaults() -> None:
    config = resolve_oss_settings(dict(BASE_ENV))

    assert config.bucket == "bucket"
    assert config.prefix == ""
    assert config.domain is None
    assert config.client.is_cname is False
    assert config.client.ssl is False
    assert config.client.security_token is None
    assert config.client.timeout == DEFAULT_TIMEOUT
    assert config.client.connect_timeout == DEFAULT_CONNECT_TIMEOUT
    assert config.client.max_retries == DEFAULT_MAX_RETRIES
    assert config.client.region == DEFAULT_REGION


def test_resolve_oss_settings_overrides() -> None:
    env = dict(BASE_ENV)
    env.update(
        {
            "ALIYUN_OSS_IS_CNAME": "true",
            "ALIYUN_OSS_SSL": "1",
            "ALIYUN_OSS_DOMAIN": "cdn.example.com",
            "ALIYUN_OSS_PREFIX": "tenant",
            "ALIYUN_OSS_SECURITY_TOKEN": "token",
            "ALIYUN_OSS_REQUEST_PROXY": "http://proxy:3128",
            "ALIYUN_OSS_TIMEOUT": "30",
            "ALIYUN_OSS_CONNECT_TIMEOUT": "5",
            "ALIYUN_OSS_MAX_RETRIES": "0",
        }
    )

    config = resolve_oss_settings(env)

    assert config.domain == "cdn.example.com"
    assert config.prefix == "tenant"
    assert config.client.is_cname is True
    assert config.client.ssl is True
    assert config.client.security_token == "token"
    assert config.client.request_proxy == "http://proxy:3128"
    assert (config.client.timeout, config.client.connect_timeout, config.client.max_retries) == (30, 5, 0)


def test_resolve_oss_settings_reads_process_env(monkeypatch) -> None:
    for name, value in BASE_ENV.items():
        monkeypatch.setenv(name, value)

    assert resolve_oss_settings().bucket == "bucket"


@pytest.mark.parametrize(
    "missing", ["ALIYUN_OSS_ACCESS_KEY_ID", "ALIYUN_OSS_ACCESS_KEY_SECRET", "ALIYUN_OSS_ENDPOINT"]
)
def test_missing_credentials_raise(missing: str) -> None:
    env = dict(BASE_ENV)
    env.pop(missing)

    with pytest.raises(ValueError, match="key, secret, and endpoint"):
        resolve_oss_settings(env)


def test_missing_bucket_raises() -> None:
    env = dict(BASE_ENV)
    env.pop("ALIYUN_OSS_BUCKET")

    with pytest.raises(ValueError, match="bucket is required"):
        resolve_oss_settings(env)


@pytest.mark.parametrize("value", ["abc", "-1"])
def test_invalid_integers_raise(value: str) -> None:
    with pytest.raises(ValueError, match="timeout"):
        client_config_from_mapping({"key": "ak", "secret": "sk", "endpoint": "e", "timeout": value})


def test_disk_options_must_be_mapping() -> None:
    with pytest.raises(ValueError, match="options must be a mapping"):
        disk_config_from_mapping(
            {"bucket": "b", "client": {"key": "ak", "secret": "sk", "endpoint": "e"}, "options": ["x"]}
        )


def test_load_disk_config_from_yaml(tmp_path) -> None:
    path = tmp_path / "filesystems.yml"
    path.write_text(
        "\n".join(
            [
                "disks:",
                "  oss:",
                "    bucket: media",
                "    prefix: uploads",
                "    domain: static.example.com",
                "    client:",
                "      key: ak",
                "      secret: sk",
                "      endpoint: oss-cn-hangzhou.aliyuncs.com",
                "      is_cname: true",
                "      ssl: true",
                "    options:",
                "      CacheControl: max-age=3600",
            ]
        ),
        encoding="utf-8",
    )

    config = load_disk_config(path)

    assert config.bucket == "media"
    assert config.prefix == "uploads"
    assert config.domain == "static.example.com"
    assert config.client.is_cname is True
    assert config.client.ssl is True
    assert config.options == {"CacheControl": "max-age=3600"}


def test_load_disk_config_unknown_disk(tmp_path) -> None:
    path = tmp_path / "filesystems.yml"
    path.write_text("disks: {}\n", encoding="utf-8")

    with pytest.raises(ValueError, match="disk 'oss' not found"):
        load_disk_config(path)
