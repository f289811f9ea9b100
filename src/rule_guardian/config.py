"""Configuration management for Rule Guardian."""

from __future__ import annotations

from functools import cached_property, lru_cache
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from rule_guardian.moderation.models import RuleSet

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_RESTRICTED_TERMS = ("sell",)
DEFAULT_PRICE_KEYWORDS = ("usd", "shipped")
DEFAULT_RULE_CHANNEL_NAMES = ("chatter",)
DEFAULT_MOD_LOG_CHANNEL_NAME = "mod-log"


def parse_csv_list(value: str | None) -> list[str]:
    """Split a comma-separated value into trimmed, non-empty items."""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def _parse_id_list(value: str | None) -> list[int]:
    return [int(item) for item in parse_csv_list(value)]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="RG_",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Discord
    discord_token: SecretStr | None = Field(
        default=None, alias="DISCORD_TOKEN", description="Discord bot token"
    )

    # Scope
    enabled: bool = Field(default=True, description="Master switch for the moderation filter")
    guild_id: int | None = Field(default=None, description="Only moderate this guild when set")
    rule_channel_ids_str: str = Field(
        default="",
        alias="RG_RULE_CHANNEL_IDS",
        description="Channel IDs to moderate (comma-separated); overrides channel names",
    )
    rule_channel_names_str: str = Field(
        default="",
        alias="RG_RULE_CHANNEL_NAMES",
        description="Channel names to moderate (comma-separated)",
    )
    exempt_role_ids_str: str = Field(
        default="",
        alias="RG_EXEMPT_ROLE_IDS",
        description="Role IDs whose members are never moderated (comma-separated)",
    )

    # Mod log
    mod_log_channel_id: int | None = Field(default=None, description="Mod-log channel ID")
    mod_log_channel_name: str = Field(
        default=DEFAULT_MOD_LOG_CHANNEL_NAME, description="Mod-log channel name fallback"
    )

    # Rules
    restricted_terms_str: str = Field(
        default="", alias="RG_RESTRICTED_TERMS", description="Restricted terms (comma-separated)"
    )
    exception_patterns_str: str = Field(
        default="",
        alias="RG_EXCEPTION_PATTERNS",
        description="Substrings that cancel any trigger (comma-separated)",
    )
    enable_price_pattern: bool = Field(default=True, description="Detect prices in messages")
    price_keywords_str: str = Field(
        default="", alias="RG_PRICE_KEYWORDS", description="Price keywords (comma-separated)"
    )

    # Warnings
    warning_cooldown_seconds: float = Field(
        default=0.0, description="Minimum seconds between warnings per user and channel"
    )
    log_matched_terms: bool = Field(
        default=True, description="Include matched terms and price signals in the mod log"
    )
    rules_url: str = Field(default="", description="Rules link appended to warnings")

    # Session state bounds
    cooldown_max_entries: int = Field(
        default=10000, description="Maximum (user, channel) cooldown entries kept in memory"
    )
    log_channel_cache_ttl_seconds: int = Field(
        default=3600, description="Seconds a resolved mod-log channel ID stays cached"
    )
    dispatch_queue_size: int = Field(
        default=0,
        description="Pending message events before new ones wait for room (0 = no cap)",
    )

    # Application
    environment: str = Field(default="production", description="Environment name")
    log_level: str = Field(default="INFO", description="Logging level")

    # Logging Configuration
    log_to_file: bool = Field(default=False, description="Enable file-based logging")
    log_directory: str = Field(default="logs", description="Directory for log files")
    log_file_max_bytes: int = Field(
        default=10485760,  # 10MB
        description="Max size per log file before rotation",
    )
    log_file_backup_count: int = Field(default=5, description="Number of rotated log files to keep")

    @field_validator("guild_id", "mod_log_channel_id", mode="before")
    @classmethod
    def validate_optional_id(cls, v: Any) -> Any:
        """Treat blank IDs as unset."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("rule_channel_ids_str", "exempt_role_ids_str")
    @classmethod
    def validate_id_list(cls, v: str) -> str:
        """Validate that every comma-separated item is an integer ID."""
        for item in parse_csv_list(v):
            if not (item.isascii() and item.isdigit()):
                raise ValueError(f"IDs must be integers, got: {item!r}")
        return v

    @field_validator("warning_cooldown_seconds")
    @classmethod
    def validate_cooldown(cls, v: float) -> float:
        """Validate the cooldown is not negative."""
        if v < 0:
            raise ValueError(f"warning_cooldown_seconds must be >= 0, got: {v}")
        return v

    @field_validator("cooldown_max_entries", "log_channel_cache_ttl_seconds")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Validate cache bounds are positive."""
        if v <= 0:
            raise ValueError(f"Value must be greater than 0, got: {v}")
        return v

    @field_validator("dispatch_queue_size")
    @classmethod
    def validate_queue_size(cls, v: int) -> int:
        """Validate the queue size is not negative."""
        if v < 0:
            raise ValueError(f"dispatch_queue_size must be >= 0, got: {v}")
        return v

    @field_validator("mod_log_channel_name")
    @classmethod
    def normalize_channel_name(cls, v: str) -> str:
        """Lower-case the mod-log channel name, falling back to the default."""
        return v.strip().lower() or DEFAULT_MOD_LOG_CHANNEL_NAME

    @cached_property
    def rule_channel_ids(self) -> frozenset[int]:
        """Channel IDs in moderation scope."""
        return frozenset(_parse_id_list(self.rule_channel_ids_str))

    @cached_property
    def rule_channel_names(self) -> frozenset[str]:
        """Lower-cased channel names in moderation scope."""
        names = parse_csv_list(self.rule_channel_names_str) or list(DEFAULT_RULE_CHANNEL_NAMES)
        return frozenset(name.lower() for name in names)

    @cached_property
    def exempt_role_ids(self) -> frozenset[int]:
        """Role IDs that are never moderated."""
        return frozenset(_parse_id_list(self.exempt_role_ids_str))

    @property
    def restricted_terms(self) -> list[str]:
        """Restricted terms, or the defaults when none are configured."""
        return parse_csv_list(self.restricted_terms_str) or list(DEFAULT_RESTRICTED_TERMS)

    @property
    def exception_patterns(self) -> list[str]:
        """Exception patterns (empty by default)."""
        return parse_csv_list(self.exception_patterns_str)

    @property
    def price_keywords(self) -> list[str]:
        """Price keywords, or the defaults when none are configured."""
        return parse_csv_list(self.price_keywords_str) or list(DEFAULT_PRICE_KEYWORDS)

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment.lower() == "development"

    @property
    def log_file_path(self) -> str:
        """Get the full log file path."""
        return f"{self.log_directory}/rule_guardian.log"

    def rule_set(self) -> RuleSet:
        """Build the raw rule set from the configured lists."""
        from rule_guardian.moderation.models import RuleSet

        return RuleSet(
            restricted_terms=tuple(self.restricted_terms),
            price_keywords=tuple(self.price_keywords),
            exception_patterns=tuple(self.exception_patterns),
            enable_price_pattern=self.enable_price_pattern,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
