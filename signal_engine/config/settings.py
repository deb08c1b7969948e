"""
Application Settings using Pydantic Settings
Loads configuration from environment variables (.env file)
"""

from typing import List, Literal, Tuple

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application configuration settings
    All values can be overridden via environment variables
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # ========================
    # Application Settings
    # ========================
    app_env: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment"
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level"
    )

    # ========================
    # Redis Configuration
    # ========================
    redis_host: str = Field(default="localhost", description="Redis host")
    redis_port: int = Field(default=6379, description="Redis port")
    redis_db: int = Field(default=0, description="Redis database number")

    redis_url: str | None = Field(
        default=None,
        description="Complete Redis URL (overrides individual settings if provided)"
    )

    @property
    def get_redis_url(self) -> str:
        """
        Get complete Redis URL
        If REDIS_URL is set, use it; otherwise construct from components
        """
        if self.redis_url:
            return self.redis_url

        return f"redis://{self.redis_host}:{self.redis_port}/{self.redis_db}"

    # ========================
    # Event Bus Configuration
    # ========================
    publish_events: bool = Field(
        default=True,
        description="Publish analysis results and alerts to Redis streams"
    )

    event_stream_max_len: int = Field(
        default=10000,
        ge=100,
        le=100000,
        description="Maximum events to keep in each Redis stream"
    )

    analysis_stream: str = Field(default="analysis", description="Stream for analysis results")
    signal_stream: str = Field(default="signals", description="Stream for activated signals")
    spoof_stream: str = Field(default="spoof_alerts", description="Stream for spoof alerts")

    # ========================
    # Market Configuration
    # ========================
    symbols: List[str] = Field(
        default_factory=lambda: ["BTCUSDT", "ETHUSDT", "SOLUSDT"],
        description="Instruments to watch"
    )

    entry_timeframe: str = Field(
        default="15m",
        description="Entry (short) timeframe used for RSI, EMA21 structure and stops"
    )

    trend_timeframe: Literal["30m", "1h"] = Field(
        default="1h",
        description="Trend (context) timeframe used for regime detection"
    )

    candle_limit: int = Field(
        default=200,
        ge=50,
        le=1000,
        description="Candles requested per timeframe"
    )

    min_candles: int = Field(
        default=50,
        ge=22,
        description="Minimum candles per timeframe before an analysis is attempted"
    )

    order_book_depth: int = Field(
        default=20,
        ge=5,
        le=1000,
        description="Order book levels per side"
    )

    # ========================
    # Polling Configuration
    # ========================
    analysis_interval_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Seconds between full analysis runs"
    )

    orderbook_interval_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Seconds between order book / spoof checks"
    )

    # ========================
    # Indicator Configuration
    # ========================
    ema_fast_period: int = Field(default=9, ge=1, description="Fast EMA period")
    ema_slow_period: int = Field(default=21, ge=1, description="Slow EMA period")
    rsi_period: int = Field(default=14, ge=1, description="RSI period")

    # ========================
    # Regime Configuration
    # ========================
    strong_trend_threshold: float = Field(
        default=0.008,
        gt=0,
        description="|EMA9 - EMA21| / EMA21 above this = strong trend"
    )

    normal_trend_threshold: float = Field(
        default=0.003,
        gt=0,
        description="|EMA9 - EMA21| / EMA21 above this = normal trend"
    )

    # ========================
    # Scoring Configuration
    # ========================
    rsi_oversold: float = Field(default=30.0, ge=0, le=100)
    rsi_overbought: float = Field(default=70.0, ge=0, le=100)

    range_entry_bias: float = Field(
        default=0.15,
        ge=0.0,
        le=1.0,
        description="Order book bias needed to trade a ranging market"
    )

    bias_confirm_threshold: float = Field(
        default=0.05,
        ge=0.0,
        le=1.0,
        description="Order book bias that confirms a direction"
    )

    bias_block_threshold: float = Field(
        default=0.2,
        ge=0.0,
        le=1.0,
        description="Opposing order book bias that blocks a direction"
    )

    ema_proximity_lower: float = Field(
        default=0.99,
        gt=0,
        le=1.0,
        description="Long is blocked below EMA21 * this"
    )

    ema_proximity_upper: float = Field(
        default=1.01,
        ge=1.0,
        description="Short is blocked above EMA21 * this"
    )

    # ========================
    # Risk Configuration
    # ========================
    swing_lookback: int = Field(default=10, ge=1, description="Bars used for swing high/low")

    structure_sl_buffer_long: float = Field(default=0.998, gt=0, le=1.0)
    structure_sl_buffer_short: float = Field(default=1.002, ge=1.0)
    min_sl_long: float = Field(default=0.992, gt=0, lt=1.0)
    min_sl_short: float = Field(default=1.008, gt=1.0)

    take_profit_multiples: Tuple[float, float, float] = Field(
        default=(1.5, 2.5, 4.0),
        description="Risk multiples for TP1 (conservative), TP2 (main), TP3 (runner)"
    )

    # ========================
    # Status Configuration
    # ========================
    active_confidence_threshold: int = Field(default=65, ge=0, le=100)
    potential_confidence_threshold: int = Field(default=40, ge=0, le=100)

    # ========================
    # Spoof Detection Configuration
    # ========================
    spoof_notional_threshold: float = Field(
        default=1_000_000.0,
        gt=0,
        description="Notional value (price * qty) that makes a level a wall"
    )

    spoof_min_duration_ms: int = Field(default=2000, ge=0)
    spoof_max_duration_ms: int = Field(default=15000, gt=0)
    spoof_alert_ttl_ms: int = Field(default=5000, gt=0)

    # ========================
    # Validators
    # ========================
    @field_validator("take_profit_multiples")
    @classmethod
    def validate_take_profit_multiples(cls, v: Tuple[float, float, float]) -> Tuple[float, float, float]:
        """Targets must be positive and strictly ascending"""
        if v[0] <= 0 or not (v[0] < v[1] < v[2]):
            raise ValueError(f"take_profit_multiples must be positive and ascending, got: {v}")
        return v

    @field_validator("entry_timeframe")
    @classmethod
    def validate_timeframe(cls, v: str) -> str:
        """Validate timeframe format like 15m / 1h / 4h / 1d"""
        if len(v) < 2 or not v[:-1].isdigit() or v[-1] not in "mhd":
            raise ValueError(f"Timeframe must look like '15m', '1h' or '1d', got: {v}")
        return v

    @model_validator(mode="after")
    def validate_ordering(self) -> "Settings":
        """Cross-field threshold ordering"""
        if self.normal_trend_threshold >= self.strong_trend_threshold:
            raise ValueError("normal_trend_threshold must be below strong_trend_threshold")
        if self.rsi_oversold >= self.rsi_overbought:
            raise ValueError("rsi_oversold must be below rsi_overbought")
        if self.potential_confidence_threshold >= self.active_confidence_threshold:
            raise ValueError("potential_confidence_threshold must be below active_confidence_threshold")
        if self.spoof_min_duration_ms >= self.spoof_max_duration_ms:
            raise ValueError("spoof_min_duration_ms must be below spoof_max_duration_ms")
        if self.min_candles <= self.rsi_period or self.min_candles < self.ema_slow_period:
            raise ValueError("min_candles must cover the RSI and slow EMA periods")
        return self

    # ========================
    # Helper Methods
    # ========================
    def is_production(self) -> bool:
        """Check if running in production"""
        return self.app_env == "production"

    def get_log_config(self) -> dict:
        """Get logging configuration"""
        return {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                },
                "detailed": {
                    "format": "%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s",
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default" if self.is_production() else "detailed",
                    "stream": "ext://sys.stdout",
                },
            },
            "root": {
                "level": self.log_level,
                "handlers": ["console"],
            },
        }


# ========================
# Global Settings Instance
# ========================
settings = Settings()


# ========================
# Convenience Functions
# ========================
def get_settings() -> Settings:
    """Get settings instance"""
    return settings


def reload_settings() -> Settings:
    """
    Reload settings from environment
    Useful for testing
    """
    global settings
    settings = Settings()
    return settings


if __name__ == "__main__":
    """
    Print effective configuration
    Run: python -m signal_engine.config.settings
    """
    import json

    print("=" * 60)
    print("Application Settings")
    print("=" * 60)
    print(json.dumps(settings.model_dump(), indent=2, default=str))
    print()
    print(f"Redis URL: {settings.get_redis_url}")
    print("=" * 60)
