from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from aws_ip_check.fetcher import DEFAULT_URL


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="AWS_IP_CHECK_")

    ip: str | None = None
    ip_range_url: str = DEFAULT_URL
    cache_file_path: str = "/tmp/aws-ip-ranges.json"
    cache_ttl_seconds: int = Field(default=0, ge=0)
    extra: bool = False
    output_format: Literal["text", "json"] = "text"
    log_level: Literal["debug", "info", "warning", "error", "critical"] = "warning"
