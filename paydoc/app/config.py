"""
Centralized configuration for the paydoc service.

Pydantic v2 settings management with strict validation and fast failure
on invalid configuration. Settings are read once per process and are
immutable afterwards.
"""

from datetime import tzinfo
from functools import lru_cache
from typing import Annotated, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from paydoc.app.registry.presets import networks_for
from paydoc.app.schemas.pay_document import ASSET_PATTERN, NETWORK_PATTERN


class PaydocSettings(BaseSettings):
    """
    Application settings parsed from the environment (``PAYDOC_`` prefix).
    """

    # ---------------------------------------------------------------------
    # Form defaults
    # ---------------------------------------------------------------------

    default_asset: Annotated[
        str,
        Field(default="USDC", pattern=ASSET_PATTERN),
    ]

    default_network: Annotated[
        str,
        Field(default="ETH-mainnet", pattern=NETWORK_PATTERN),
    ]

    default_expiry_hours: Annotated[
        int,
        Field(
            default=24,
            ge=1,
            le=8760,
            description="Suggested expiry offset for a fresh form",
        ),
    ]

    # ---------------------------------------------------------------------
    # Expiry interpretation
    # ---------------------------------------------------------------------

    local_timezone: Annotated[
        Optional[str],
        Field(
            default=None,
            description=(
                "IANA zone used to read local expiry input. "
                "Unset means the platform local zone."
            ),
        ),
    ]

    # ---------------------------------------------------------------------
    # Operational boundaries
    # ---------------------------------------------------------------------

    max_upload_bytes: Annotated[
        int,
        Field(
            default=64 * 1024,
            ge=1024,
            description="Upper bound for uploaded .pay files",
        ),
    ]

    log_level: Annotated[
        str,
        Field(default="INFO"),
    ]

    model_config = SettingsConfigDict(
        env_prefix="PAYDOC_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
    )

    @field_validator("local_timezone")
    @classmethod
    def timezone_must_exist(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown PAYDOC_LOCAL_TIMEZONE '{v}'") from exc
        return v

    @field_validator("log_level")
    @classmethod
    def log_level_is_known(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        level = v.upper()
        if level not in allowed:
            raise ValueError(
                f"Unsupported PAYDOC_LOG_LEVEL '{v}'. "
                f"Allowed values: {sorted(allowed)}"
            )
        return level

    @model_validator(mode="after")
    def default_network_is_offered(self) -> "PaydocSettings":
        offered = networks_for(self.default_asset)
        if offered and self.default_network not in offered:
            raise ValueError(
                f"PAYDOC_DEFAULT_NETWORK '{self.default_network}' is not "
                f"offered for asset '{self.default_asset}': {offered}"
            )
        return self

    def expiry_zone(self) -> Optional[tzinfo]:
        """Configured expiry zone, or None for the platform local zone."""
        return ZoneInfo(self.local_timezone) if self.local_timezone else None


@lru_cache(maxsize=1)
def get_settings() -> PaydocSettings:
    """
    Dependency injection provider for application settings.
    """
    return PaydocSettings()  # singleton within process
