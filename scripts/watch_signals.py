"""
Watch Signals
Consume activated signals and spoof alerts from Redis
Run: python scripts/watch_signals.py
"""

import asyncio

from signal_engine.config.settings import settings
from signal_engine.event_bus.bus import EventBus
from signal_engine.events.signal_events import SignalActivatedEvent, SpoofAlertEvent


def print_event(event):
    if isinstance(event, SignalActivatedEvent):
        print(
            f"🚨 {event.symbol} {event.direction} @ {event.entry_price:.2f} | "
            f"score {event.confidence_score} | SL {event.stop_loss:.2f} | "
            f"TP {', '.join(f'{tp:.2f}' for tp in event.take_profits)}"
        )
    elif isinstance(event, SpoofAlertEvent):
        print(f"🧱 {event.symbol} {event.message}")


async def main():
    bus = EventBus(redis_url=settings.get_redis_url)
    streams = {
        settings.signal_stream: SignalActivatedEvent,
        settings.spoof_stream: SpoofAlertEvent,
    }

    try:
        lengths = await bus.stream_lengths(streams)

        print("=" * 70)
        for name, length in lengths.items():
            print(f"  • {name}: {length} entries")
        print("Watching for new entries (Ctrl+C to stop)")
        print("=" * 70)

        await bus.subscribe(streams, consumer_group="watchers", consumer_name="terminal", handler=print_event)
    finally:
        await bus.disconnect()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
