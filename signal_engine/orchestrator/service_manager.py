"""
Service Manager
Manage all polling services (analysis loops, order book monitors)
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from ..analysis.market_analyzer import MarketAnalyzer
from ..analysis.spoof_detector import SpoofDetector
from ..config.settings import Settings, get_settings
from ..event_bus.bus import EventBus
from ..feeds.base import MarketDataFeed
from ..services.analysis_service import AnalysisService
from ..services.orderbook_monitor import OrderBookMonitor
from ..utils.timeutils import now_utc

logger = logging.getLogger(__name__)


class ServiceStatus(str, Enum):
    """Service status"""
    STOPPED = "stopped"
    STARTING = "starting"
    RUNNING = "running"
    STOPPING = "stopping"
    ERROR = "error"


@dataclass
class ServiceInfo:
    """Service information"""
    name: str
    status: ServiceStatus
    service: Any = None
    task: Optional[asyncio.Task] = None
    started_at: Optional[datetime] = None
    error: Optional[str] = None


class ServiceManager:
    """
    Manage all system services

    Per symbol:
    - AnalysisService   (full analysis, slow cadence)
    - OrderBookMonitor  (spoof detection, fast cadence)
    """

    def __init__(
        self,
        symbols: List[str],
        feed: MarketDataFeed,
        event_bus: Optional[EventBus] = None,
        settings: Optional[Settings] = None
    ):
        """
        Initialize service manager

        Args:
            symbols: Instruments to watch
            feed: Market data source shared by all services
            event_bus: Event bus for publishing (None = don't publish)
            settings: Settings (default: global settings)
        """
        self.symbols = list(symbols)
        self.feed = feed
        self.event_bus = event_bus
        self.settings = settings or get_settings()

        self.services: Dict[str, ServiceInfo] = {}
        self._shutdown_event = asyncio.Event()

    def build_services(self) -> Dict[str, ServiceInfo]:
        """Create one analysis service and one order book monitor per symbol"""
        s = self.settings
        analyzer = MarketAnalyzer.from_settings(s)

        for symbol in self.symbols:
            analysis = AnalysisService(
                symbol=symbol,
                feed=self.feed,
                analyzer=analyzer,
                event_bus=self.event_bus,
                entry_timeframe=s.entry_timeframe,
                trend_timeframe=s.trend_timeframe,
                candle_limit=s.candle_limit,
                order_book_depth=s.order_book_depth,
                interval_seconds=s.analysis_interval_seconds,
                analysis_stream=s.analysis_stream,
                signal_stream=s.signal_stream
            )
            monitor = OrderBookMonitor(
                symbol=symbol,
                feed=self.feed,
                detector=SpoofDetector(
                    notional_threshold=s.spoof_notional_threshold,
                    min_duration_ms=s.spoof_min_duration_ms,
                    max_duration_ms=s.spoof_max_duration_ms,
                    alert_ttl_ms=s.spoof_alert_ttl_ms,
                    symbol=symbol
                ),
                event_bus=self.event_bus,
                depth=s.order_book_depth,
                interval_seconds=s.orderbook_interval_seconds,
                spoof_stream=s.spoof_stream
            )

            for name, service in ((f"analysis:{symbol}", analysis), (f"orderbook:{symbol}", monitor)):
                self.services[name] = ServiceInfo(name=name, status=ServiceStatus.STOPPED, service=service)

        return self.services

    async def _run_service(self, info: ServiceInfo):
        """Run one service, tracking its status"""
        try:
            info.status = ServiceStatus.RUNNING
            info.started_at = now_utc()
            await info.service.start()
            info.status = ServiceStatus.STOPPED

        except asyncio.CancelledError:
            logger.info(f"🛑 {info.name} cancelled")
            info.status = ServiceStatus.STOPPED
            raise

        except Exception as e:
            logger.error(f"❌ {info.name} error: {e}", exc_info=True)
            info.status = ServiceStatus.ERROR
            info.error = str(e)

    async def start_services(self):
        """Start every service as a task (non-blocking)"""
        if not self.services:
            self.build_services()

        if self.event_bus is not None:
            await self.event_bus.connect()

        for name, info in self.services.items():
            info.status = ServiceStatus.STARTING
            logger.info(f"🚀 Starting {name}...")
            info.task = asyncio.create_task(self._run_service(info), name=name)

    async def start_all(self):
        """Start all services and run until shutdown is requested"""
        logger.info("=" * 70)
        logger.info(f"🚀 Starting Market Signal Engine for {', '.join(self.symbols)}")
        logger.info("=" * 70)

        await self.start_services()
        await asyncio.sleep(0)

        logger.info("✅ All services started")
        self.print_status()
        logger.info("Press Ctrl+C to stop all services")

        try:
            await self._shutdown_event.wait()
        except asyncio.CancelledError:
            pass

        await self.stop_all()

    async def stop_all(self):
        """Stop all services gracefully"""
        logger.info("=" * 70)
        logger.info("🛑 Stopping all services...")
        logger.info("=" * 70)

        for name, info in self.services.items():
            if info.service is not None:
                info.service.stop()
            if info.task and not info.task.done():
                logger.info(f"🛑 Stopping {name}...")
                info.status = ServiceStatus.STOPPING
                info.task.cancel()

        tasks = [info.task for info in self.services.values() if info.task]
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

        for info in self.services.values():
            if info.status == ServiceStatus.STOPPING:
                info.status = ServiceStatus.STOPPED

        if self.event_bus:
            await self.event_bus.disconnect()
        await self.feed.close()

        logger.info("✅ All services stopped")

    def get_service(self, name: str) -> Any:
        """Service object by name, e.g. 'analysis:BTCUSDT'"""
        info = self.services.get(name)
        return info.service if info else None

    def print_status(self):
        """Log service status"""
        logger.info("Service Status:")
        logger.info("-" * 70)

        for name, info in self.services.items():
            status_icon = {
                ServiceStatus.STOPPED: "⚫",
                ServiceStatus.STARTING: "🟡",
                ServiceStatus.RUNNING: "🟢",
                ServiceStatus.STOPPING: "🟡",
                ServiceStatus.ERROR: "🔴"
            }.get(info.status, "⚪")

            uptime = ""
            if info.started_at and info.status == ServiceStatus.RUNNING:
                elapsed = (now_utc() - info.started_at).total_seconds()
                uptime = f" (uptime: {int(elapsed)}s)"

            error_msg = f" - Error: {info.error}" if info.error else ""

            logger.info(f"{status_icon} {name:24s} {info.status.value:10s}{uptime}{error_msg}")

        logger.info("-" * 70)

    def request_shutdown(self):
        """Ask start_all() to stop"""
        logger.info("🛑 Shutdown requested")
        self._shutdown_event.set()
