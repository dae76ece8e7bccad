import pytest
from pydantic import ValidationError

from aws_ip_check.config import Settings


def test_default_settings(monkeypatch):
    for name in ("IP", "IP_RANGE_URL", "CACHE_FILE_PATH", "CACHE_TTL_SECONDS", "EXTRA", "OUTPUT_FORMAT", "LOG_LEVEL"):
        monkeypatch.delenv(f"AWS_IP_CHECK_{name}", raising=False)
    settings = Settings()
    assert settings.ip is None
    assert settings.ip_range_url == "https://ip-ranges.amazonaws.com/ip-ranges.json"
    assert settings.cache_file_path == "/tmp/aws-ip-ranges.json"
    assert settings.cache_ttl_seconds == 0
    assert settings.extra is False
    assert settings.output_format == "text"
    assert settings.log_level == "warning"


def test_custom_settings(monkeypatch):
    monkeypatch.setenv("AWS_IP_CHECK_IP", "13.32.91.219")
    monkeypatch.setenv("AWS_IP_CHECK_CACHE_TTL_SECONDS", "3600")
    monkeypatch.setenv("AWS_IP_CHECK_EXTRA", "true")
    monkeypatch.setenv("AWS_IP_CHECK_OUTPUT_FORMAT", "json")
    settings = Settings()
    assert settings.ip == "13.32.91.219"
    assert settings.cache_ttl_seconds == 3600
    assert settings.extra is True
    assert settings.output_format == "json"


def test_negative_ttl_rejected(monkeypatch):
    monkeypatch.setenv("AWS_IP_CHECK_CACHE_TTL_SECONDS", "-1")
    with pytest.raises(ValidationError):
        Settings()
