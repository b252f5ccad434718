from pydantic import BaseModel, ConfigDict, field_validator

from blackbeard.constants import DEFAULT_BASE_URL, DEFAULT_REQUEST_TIMEOUT


class ClientSettings(BaseModel):
    """
    Settings for one Pirate Metrics client.

    ``base_url`` always ends with a single ``/`` so endpoint names can be
    appended directly.
    """

    api_key: str = ""
    base_url: str = DEFAULT_BASE_URL
    debug: bool = False
    timeout: float = DEFAULT_REQUEST_TIMEOUT

    model_config = ConfigDict(frozen=True)

    @field_validator("api_key")
    @classmethod
    def strip_api_key(cls, value: str) -> str:
        return value.strip()

    @field_validator("base_url")
    @classmethod
    def normalize_base_url(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("base_url must not be empty")
        return value.rstrip("/") + "/"

    @field_validator("timeout")
    @classmethod
    def positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeout must be greater than zero")
        return value

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key)

    def url_for(self, endpoint: str) -> str:
        return self.base_url + endpoint.lstrip("/")
