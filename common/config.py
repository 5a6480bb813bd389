from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class SpeechSettings(BaseSettings):
    key: str = ""
    region: str = ""
    api_version: str = "v3.1"
    endpoint: str = ""
    request_timeout_s: Optional[float] = None

    model_config = {"env_prefix": "AZURE_SPEECH_"}

    @property
    def is_configured(self) -> bool:
        return bool(self.key and (self.region or self.endpoint))

    @property
    def transcriptions_url(self) -> str:
        if self.endpoint:
            return self.endpoint.rstrip("/")
        return f"https://{self.region}.cris.ai/api/speechtotext/{self.api_version}/transcriptions"


class SummarizerSettings(BaseSettings):
    api_key: str = ""
    model_name: str = "gemini-2.0-flash"
    temperature: float = 0.7
    top_k: int = 1
    top_p: float = 1.0
    max_output_tokens: int = 1024

    model_config = {"env_prefix": "GEMINI_"}

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)


class GatewaySettings(BaseSettings):
    host: str = "0.0.0.0"
    port: int = 8000

    model_config = {"env_prefix": "GATEWAY_"}


class ClientSettings(BaseSettings):
    gateway_url: str = "http://localhost:8000"
    poll_interval_s: float = 7.0
    poll_max_duration_s: Optional[float] = None
    locale: str = "en-US"
    max_speakers: int = Field(default=5, ge=1, le=10)

    model_config = {"env_prefix": "CLIENT_"}
