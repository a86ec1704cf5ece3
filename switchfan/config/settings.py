# config/settings.py
"""
Configuration for the fan controller, read from the environment (and an optional .env file).

The seven device and threshold variables are required; there is no sensible default
for an address, a credential or a temperature limit.
"""

from typing import Optional

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from switchfan.utils.exceptions import ConfigurationException


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Switch polled for its temperature (SNMPv3, authPriv)
    SWITCH_IP: str
    SNMP_PORT: int = 161
    SNMP_USERNAME: str
    SNMP_PASSWORD: str  # used for both the auth and the privacy passphrase
    TEMPERATURE_OID: str

    # TP-Link HS1xx plug powering the fan
    HS1XX_SOCKET_IP: str
    HS1XX_SOCKET_PORT: int = 9999

    # Hysteresis thresholds
    MAXIMUM_OFF_TEMPERATURE: int  # at or above this the fan is switched on
    MINIMAL_ON_TEMPERATURE: int   # at or below this the fan is switched off

    POLL_INTERVAL: int = Field(60, gt=0)  # seconds between control cycles
    LOG_LEVEL: str = "INFO"

    @property
    def thresholds_inverted(self) -> bool:
        return self.MAXIMUM_OFF_TEMPERATURE < self.MINIMAL_ON_TEMPERATURE


def _describe_errors(error: ValidationError) -> str:
    problems = []
    for item in error.errors():
        name = ".".join(str(part) for part in item.get("loc", ())) or "settings"
        if item.get("type") == "missing":
            problems.append(f"{name} environment variable not set")
        else:
            problems.append(f"{name} is invalid: {item.get('msg')}")
    return "; ".join(problems)


def load_settings(env_file: Optional[str] = ".env") -> Settings:
    """Load and validate settings, raising ConfigurationException on any problem"""
    try:
        return Settings(_env_file=env_file)
    except ValidationError as e:
        raise ConfigurationException(_describe_errors(e)) from e
