from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file='.env', env_file_encoding='utf-8')

    app_name: str = 'Rootbound'
    app_host: str = '127.0.0.1'
    app_port: int = Field(default=8765, ge=1, le=65535)
    log_level: str = 'info'
    cors_origins: str = ''
    api_token: str = ''
    mount_bases: str = '/media,/run/media,/mnt'
    mount_user: str = ''


settings = Settings()
