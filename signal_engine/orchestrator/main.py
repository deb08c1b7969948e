"""
Main Orchestrator
Single entry point to run the signal engine
"""

import argparse
import asyncio
import logging
import logging.config
import signal
from typing import List, Optional

from ..config.settings import Settings, get_settings
from ..event_bus.bus import EventBus
from ..feeds.base import MarketDataFeed
from ..feeds.mock_feed import MockMarketFeed
from ..utils.timeutils import TimeHandler, now_utc
from .service_manager import ServiceManager

logger = logging.getLogger(__name__)


class MainOrchestrator:
    """
    Main system orchestrator

    Manages:
    - All services (analysis loops, order book monitors)
    - Graceful shutdown on SIGINT / SIGTERM
    """

    def __init__(
        self,
        feed: MarketDataFeed,
        symbols: Optional[List[str]] = None,
        settings: Optional[Settings] = None,
        publish_events: Optional[bool] = None
    ):
        """
        Initialize orchestrator

        Args:
            feed: Market data source
            symbols: Instruments to watch (default: settings.symbols)
            settings: Settings (default: global settings)
            publish_events: Override settings.publish_events
        """
        self.settings = settings or get_settings()
        self.feed = feed
        self.symbols = symbols or list(self.settings.symbols)
        self.publish_events = self.settings.publish_events if publish_events is None else publish_events

        event_bus = None
        if self.publish_events:
            event_bus = EventBus(
                redis_url=self.settings.get_redis_url,
                max_stream_length=self.settings.event_stream_max_len
            )

        self.service_manager = ServiceManager(
            symbols=self.symbols,
            feed=feed,
            event_bus=event_bus,
            settings=self.settings
        )

    def signal_handler(self, sig, frame):
        """Handle shutdown signal"""
        self.service_manager.request_shutdown()

    async def start(self):
        """Start entire system and block until shutdown"""
        self.print_banner()

        signal.signal(signal.SIGINT, self.signal_handler)
        signal.signal(signal.SIGTERM, self.signal_handler)

        await self.service_manager.start_all()

    def print_banner(self):
        """Print startup banner"""
        s = self.settings
        banner = rf"""
{"=" * 70}
   ____  _                   _   _____             _
  / ___|(_) __ _ _ __   __ _| | | ____|_ __   __ _(_)_ __   ___
  \___ \| |/ _` | '_ \ / _` | | |  _| | '_ \ / _` | | '_ \ / _ \
   ___) | | (_| | | | | (_| | | | |___| | | | (_| | | | | |  __/
  |____/|_|\__, |_| |_|\__,_|_| |_____|_| |_|\__, |_|_| |_|\___|
           |___/                             |___/

         Market Signal & Microstructure Engine
{"=" * 70}

System Information:
  • Started: {TimeHandler.format_utc(now_utc())}
  • Environment: {s.app_env}
  • Redis: {s.get_redis_url if self.publish_events else "disabled (not publishing)"}
  • Feed: {type(self.feed).__name__}

Market Configuration:
  • Symbols: {", ".join(self.symbols)}
  • Timeframes: entry {s.entry_timeframe} / trend {s.trend_timeframe}
  • Analysis every {s.analysis_interval_seconds}s, order book every {s.orderbook_interval_seconds}s

Features:
  ✅ EMA regime detection
  ✅ RSI / EMA21 / order book confluence scoring
  ✅ Structure-based stop-loss and take-profit levels
  ✅ Spoof wall detection (${s.spoof_notional_threshold:,.0f}+ walls, {s.spoof_min_duration_ms / 1000:.0f}-{s.spoof_max_duration_ms / 1000:.0f}s)

{"=" * 70}
"""
        print(banner)


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Apply the settings' logging configuration"""
    logging.config.dictConfig((settings or get_settings()).get_log_config())


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run the market signal engine")
    parser.add_argument("--symbols", nargs="+", default=None,
                        help="Symbols to watch (default: SYMBOLS setting)")
    parser.add_argument("--seed", type=int, default=42,
                        help="Mock feed random seed")
    parser.add_argument("--no-publish", action="store_true",
                        help="Do not publish events to Redis")
    return parser


def run(argv: Optional[List[str]] = None) -> None:
    """Console entry point"""
    args = build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(settings)

    orchestrator = MainOrchestrator(
        feed=MockMarketFeed(seed=args.seed),
        symbols=args.symbols,
        settings=settings,
        publish_events=False if args.no_publish else None
    )

    try:
        asyncio.run(orchestrator.start())
    except KeyboardInterrupt:
        logger.info("Shutdown complete")


if __name__ == "__main__":
    run()
