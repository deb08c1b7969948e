"""
One-Shot Analysis
Run a single analysis and a short spoof-detection pass over mock data
Run: python scripts/analyze_once.py [SYMBOL]
"""

import asyncio
import sys

from signal_engine.analysis.market_analyzer import MarketAnalyzer
from signal_engine.analysis.spoof_detector import SpoofDetector
from signal_engine.config.settings import settings
from signal_engine.feeds.mock_feed import MockMarketFeed


async def analyze_once(symbol: str):
    feed = MockMarketFeed(seed=7, wall_probability=0.5)
    analyzer = MarketAnalyzer.from_settings(settings)

    entry = await feed.fetch_candles(symbol, settings.entry_timeframe, settings.candle_limit)
    trend = await feed.fetch_candles(symbol, settings.trend_timeframe, settings.candle_limit)
    book = await feed.fetch_order_book(symbol, settings.order_book_depth)

    result = analyzer.analyze(entry, trend, book)

    print("=" * 70)
    print(f"Analysis: {symbol}")
    print("=" * 70)
    print()

    print("1. Market Context:")
    print("-" * 70)
    print(f"   Regime:        {result.regime.value} ({result.trend.value})")
    print(f"   EMA9 / EMA21:  {result.ema9:.2f} / {result.ema21:.2f} ({settings.trend_timeframe})")
    print(f"   RSI:           {result.rsi:.1f} ({settings.entry_timeframe})")
    print(f"   Book bias:     {result.order_book_bias:+.2f}")
    print()

    print("2. Signal:")
    print("-" * 70)
    print(f"   Status:        {result.status.value}")
    print(f"   Direction:     {result.direction.value}")
    print(f"   Confidence:    {result.confidence_score}/100")
    for reason in result.confirmations:
        print(f"   ✅ {reason}")
    for reason in result.blocking_reasons:
        print(f"   ⛔ {reason}")
    print()

    if result.take_profits:
        print("3. Trade Levels:")
        print("-" * 70)
        print(f"   Entry:         {result.entry_price:.2f}")
        print(f"   Stop loss:     {result.stop_loss:.2f}")
        for i, tp in enumerate(result.take_profits, 1):
            print(f"   TP{i}:           {tp:.2f}")
        print(f"   Risk:Reward:   1:{result.risk_reward}")
        print()

    print("4. Spoof Watch (10 snapshots, 3s apart):")
    print("-" * 70)
    detector = SpoofDetector(
        notional_threshold=settings.spoof_notional_threshold,
        min_duration_ms=settings.spoof_min_duration_ms,
        max_duration_ms=settings.spoof_max_duration_ms,
        alert_ttl_ms=settings.spoof_alert_ttl_ms,
        symbol=symbol
    )
    start_ms = book.last_update
    alerts = 0
    for i in range(10):
        snapshot = await feed.fetch_order_book(symbol, settings.order_book_depth)
        for alert in detector.process_snapshot(snapshot, now_ms=start_ms + i * 3000):
            alerts += 1
            print(f"   🚨 {alert.message} ({alert.side}, ${alert.notional:,.0f})")
    if not alerts:
        print("   No spoofing detected")
    print()
    print("=" * 70)


if __name__ == "__main__":
    asyncio.run(analyze_once(sys.argv[1] if len(sys.argv) > 1 else "BTCUSDT"))
