"""
Event Bus using Redis Streams
Publishes analysis results and alerts; lets watchers consume them

One stream per event kind (see Settings.*_stream). Consumers read through
a consumer group so a crashed watcher picks up its unacknowledged entries.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Type

import redis.asyncio as redis
from pydantic import ValidationError
from redis.exceptions import ResponseError

from ..events.base import BaseEvent

logger = logging.getLogger(__name__)


EventHandler = Callable[[BaseEvent], Any]


class EventBus:
    """
    Redis Streams transport for engine events

    Publishing trims each stream to about `max_stream_length` entries.
    Subscribing acknowledges an entry only after its handler returned.
    """

    def __init__(
        self,
        redis_url: str,
        max_stream_length: int = 10000,
        consumer_block_ms: int = 1000,
        batch_size: int = 10,
        client: Optional[Any] = None
    ):
        """
        Initialize Event Bus

        Args:
            redis_url: Redis connection URL
            max_stream_length: Approximate MAXLEN per stream
            consumer_block_ms: How long one read waits for new entries
            batch_size: Entries read per stream per call
            client: Already-built async Redis client (skips from_url)
        """
        self.redis_url = redis_url
        self.max_stream_length = max_stream_length
        self.consumer_block_ms = consumer_block_ms
        self.batch_size = batch_size

        self.client = client
        self._running = False

    async def connect(self):
        """Connect to Redis"""
        if self.client is None:
            self.client = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True
            )
            logger.info(f"✅ Connected to Redis: {self.redis_url}")

    async def disconnect(self):
        """Disconnect from Redis"""
        if self.client is not None:
            await self.client.aclose()
            self.client = None
            logger.info("✅ Disconnected from Redis")

    async def publish(self, event: BaseEvent, stream_name: str) -> str:
        """
        Append an event to a stream

        Returns:
            Entry ID assigned by Redis

        Raises:
            Whatever the client raises; callers decide whether a lost
            publish matters (the services only log it)
        """
        if self.client is None:
            await self.connect()

        try:
            entry_id = await self.client.xadd(
                name=stream_name,
                fields={"data": event.to_json()},
                maxlen=self.max_stream_length,
                approximate=True
            )
        except Exception as e:
            logger.error(f"❌ Failed to publish {event.event_type} for {event.symbol} to {stream_name}: {e}")
            raise

        logger.debug(f"📤 {event.event_type} {event.symbol} -> {stream_name} ({entry_id})")
        return entry_id

    async def stream_lengths(self, stream_names: Iterable[str]) -> Dict[str, int]:
        """Current entry count per stream (0 for streams not created yet)"""
        if self.client is None:
            await self.connect()

        return {name: int(await self.client.xlen(name)) for name in stream_names}

    async def _ensure_consumer_group(self, stream_name: str, consumer_group: str):
        """Create the group (and stream) unless it already exists"""
        try:
            await self.client.xgroup_create(
                name=stream_name,
                groupname=consumer_group,
                id="0",
                mkstream=True
            )
            logger.info(f"✅ Created consumer group '{consumer_group}' on '{stream_name}'")

        except ResponseError as e:
            if "BUSYGROUP" not in str(e):
                raise
            logger.debug(f"Consumer group '{consumer_group}' already exists on '{stream_name}'")

    async def _dispatch(
        self,
        stream_name: str,
        consumer_group: str,
        entry_id: str,
        fields: Mapping[str, str],
        event_type: Type[BaseEvent],
        handler: EventHandler
    ) -> bool:
        """
        Decode one entry, run the handler, acknowledge

        Returns:
            True when the entry was acknowledged
        """
        try:
            event = event_type.from_json(fields.get("data", "{}"))
        except ValidationError as e:
            # Undecodable entries would be redelivered forever
            logger.warning(f"⚠️ Dropping undecodable entry {entry_id} on '{stream_name}': {e.error_count()} errors")
            await self.client.xack(stream_name, consumer_group, entry_id)
            return True

        try:
            if asyncio.iscoroutinefunction(handler):
                await handler(event)
            else:
                handler(event)
        except Exception as e:
            # Left pending for redelivery
            logger.error(f"❌ Handler failed for {event.event_type} ({entry_id}): {e}", exc_info=True)
            return False

        await self.client.xack(stream_name, consumer_group, entry_id)
        logger.debug(f"✅ Processed and ACK'd: {event.event_type} ({entry_id})")
        return True

    async def read_once(
        self,
        streams: Mapping[str, Type[BaseEvent]],
        consumer_group: str,
        consumer_name: str,
        handler: EventHandler
    ) -> int:
        """
        One blocking read across all streams

        Args:
            streams: Stream name -> event class used to decode its entries
            consumer_group: Consumer group name
            consumer_name: This consumer's unique name
            handler: Sync or async function called per event

        Returns:
            Number of entries acknowledged
        """
        messages = await self.client.xreadgroup(
            groupname=consumer_group,
            consumername=consumer_name,
            streams={name: ">" for name in streams},
            count=self.batch_size,
            block=self.consumer_block_ms
        )

        acked = 0
        for stream_name, entries in messages or []:
            event_type = streams.get(stream_name, BaseEvent)
            for entry_id, fields in entries:
                if await self._dispatch(stream_name, consumer_group, entry_id, fields, event_type, handler):
                    acked += 1
        return acked

    async def subscribe(
        self,
        streams: Mapping[str, Type[BaseEvent]],
        consumer_group: str,
        consumer_name: str,
        handler: EventHandler
    ):
        """
        Consume the given streams until stop() is called or the task is cancelled

        Example:
            await bus.subscribe(
                {"signals": SignalActivatedEvent, "spoof_alerts": SpoofAlertEvent},
                consumer_group="watchers",
                consumer_name="terminal",
                handler=print
            )
        """
        if self.client is None:
            await self.connect()

        for stream_name in streams:
            await self._ensure_consumer_group(stream_name, consumer_group)

        logger.info(f"👂 Subscribing to {', '.join(streams)} as '{consumer_group}:{consumer_name}'")
        self._running = True

        try:
            while self._running:
                try:
                    await self.read_once(streams, consumer_group, consumer_name, handler)
                except asyncio.CancelledError:
                    raise
                except Exception as e:
                    logger.error(f"❌ Error in subscription loop: {e}", exc_info=True)
                    await asyncio.sleep(1)
        finally:
            self._running = False
            logger.info(f"🛑 Stopped subscribing to {', '.join(streams)}")

    def stop(self):
        """Stop the subscription loop after the current read"""
        self._running = False
