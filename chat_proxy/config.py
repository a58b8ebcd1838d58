from dataclasses import dataclass
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


@dataclass(frozen=True)
class ProxyConfig:
    """Everything ChatProxy needs to talk to the upstream provider."""

    api_key: Optional[str]
    base_url: str
    model: str
    temperature: float = 0.7
    max_tokens: int = 2000
    default_system_prompt: str = "You are a helpful assistant."

    @property
    def completions_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/v1/chat/completions"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    DEEPSEEK_API_KEY: str | None = None
    DEEPSEEK_API_URL: str = Field(default="https://api.deepseek.com")
    DEEPSEEK_MODEL: str = Field(default="deepseek-chat")

    CHAT_TEMPERATURE: float = Field(default=0.7)
    CHAT_MAX_TOKENS: int = Field(default=2000)
    DEFAULT_SYSTEM_PROMPT: str = Field(default="You are a helpful assistant.")
    UPSTREAM_TIMEOUT: float = Field(default=60.0)

    CORS_ALLOW_ORIGIN: str = Field(default="*")
    GRAPHQL_PATH: str = Field(default="/")
    ENABLE_GRAPHIQL: bool = Field(default=True)

    APP_NAME: str = Field(default="Chat Proxy")
    APP_ENV: str = Field(default="dev")
    LOG_LEVEL: str = Field(default="INFO")

    def proxy_config(self) -> ProxyConfig:
        return ProxyConfig(
            api_key=self.DEEPSEEK_API_KEY or None,
            base_url=self.DEEPSEEK_API_URL,
            model=self.DEEPSEEK_MODEL,
            temperature=self.CHAT_TEMPERATURE,
            max_tokens=self.CHAT_MAX_TOKENS,
            default_system_prompt=self.DEFAULT_SYSTEM_PROMPT,
        )


settings = Settings()
