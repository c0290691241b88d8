from contextlib import asynccontextmanager
from datetime import date
from typing import AsyncIterator
from uuid import UUID

import redis.asyncio as redis
from fastapi import HTTPException
from redis.exceptions import LockError

from app.core.config import settings
from app.core.logger import logger


def booking_lock_keys(room_id: UUID, doctor_id: UUID, day: date) -> list[str]:
    # Sorted so that concurrent bookings always acquire in the same order
    return sorted([
        f"booking:room:{room_id}:{day.isoformat()}",
        f"booking:doctor:{doctor_id}:{day.isoformat()}",
    ])


class RedisClient:
    def __init__(self):
        self.redis = redis.from_url(settings.REDIS_URL, encoding="utf-8", decode_responses=True)

    @asynccontextmanager
    async def booking_lock(self, room_id: UUID, doctor_id: UUID, day: date) -> AsyncIterator[None]:
        """
        Serialise the read-check-write sequence of a booking.

        Holds one lock per room/day and one per doctor/day, so two requests that
        could double-book the same room or the same doctor never interleave.
        """
        held = []
        try:
            for key in booking_lock_keys(room_id, doctor_id, day):
                lock = self.redis.lock(
                    key,
                    timeout=settings.BOOKING_LOCK_TIMEOUT_SECONDS,
                    blocking_timeout=settings.BOOKING_LOCK_WAIT_SECONDS,
                )
                if not await lock.acquire():
                    logger.warning(f"Booking lock busy: {key}")
                    raise HTTPException(
                        status_code=409,
                        detail="Another booking for this slot is in progress, please retry"
                    )
                held.append(lock)
            yield
        finally:
            for lock in reversed(held):
                try:
                    await lock.release()
                except LockError:
                    logger.warning(f"Booking lock expired before release: {lock.name}")

    async def close(self):
        await self.redis.close()

redis_client = RedisClient()
