# eda_workshop/settings.py
import time
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StackSettings(BaseSettings):
    """
    Deployment settings read from environment variables or a .env file.
    Every physical resource name is suffixed with the participant id so that
    several participants can deploy into the same account.
    """
    model_config = SettingsConfigDict(
        env_file='.env', env_file_encoding='utf-8', extra='ignore', populate_by_name=True
    )

    participant_id: str = Field("gblusthe", alias='PARTICIPANT_ID', pattern=r"^[A-Za-z0-9]+$")
    central_event_bus_arn: str = Field(
        "arn:aws:events:eu-central-1:157983949820:event-bus/event-driven-elves",
        alias='CENTRAL_EVENT_BUS_ARN',
    )
    central_bucket_arn: str = Field("arn:aws:s3:::event-driven-elves", alias='CENTRAL_BUCKET_ARN')
    elf_name: str = Field("elf-luke", alias='ELF_NAME')
    enable_nag: bool = Field(False, alias='ENABLE_NAG')
    log_group_timestamp: Optional[int] = Field(None, alias='LOG_GROUP_TIMESTAMP')

    @field_validator('central_event_bus_arn')
    @classmethod
    def _check_bus_arn(cls, value: str) -> str:
        if not value.startswith("arn:") or ":events:" not in value or ":event-bus/" not in value:
            raise ValueError(f"Not an EventBridge event bus ARN: {value}")
        return value

    @field_validator('central_bucket_arn')
    @classmethod
    def _check_bucket_arn(cls, value: str) -> str:
        if not value.startswith("arn:") or ":s3:::" not in value:
            raise ValueError(f"Not an S3 bucket ARN: {value}")
        return value

    def name(self, base: str) -> str:
        """Physical name for a resource, e.g. EDAWorkshopBus -> EDAWorkshopBus-<id>."""
        return f"EDAWorkshop{base}-{self.participant_id}"

    @property
    def stack_name(self) -> str:
        return self.name("Stack")

    @property
    def bus_name(self) -> str:
        return self.name("Bus")

    @property
    def api_name(self) -> str:
        return self.name("API")

    @property
    def model_name(self) -> str:
        # API Gateway model names must be alphanumeric
        return f"WishlistRequestModel{self.participant_id}"

    @property
    def log_group_name(self) -> str:
        timestamp = self.log_group_timestamp
        if timestamp is None:
            timestamp = int(time.time() * 1000)
        return f"{self.name('BusLogGroup')}-{timestamp}"


def get_settings() -> StackSettings:
    return StackSettings()
