import asyncio
from collections import defaultdict
from contextlib import asynccontextmanager

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.deps import get_booking_locks
from app.core.redis import booking_lock_keys
from app.db.session import get_session, init_db
from app.main import app

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

class InProcessBookingLocks:
    """Same contract as RedisClient.booking_lock, backed by asyncio locks."""

    def __init__(self):
        self.locks = defaultdict(asyncio.Lock)

    @asynccontextmanager
    async def booking_lock(self, room_id, doctor_id, day):
        held = []
        try:
            for key in booking_lock_keys(room_id, doctor_id, day):
                await self.locks[key].acquire()
                held.append(self.locks[key])
            yield
        finally:
            for lock in reversed(held):
                lock.release()

@pytest_asyncio.fixture
async def engine():
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await init_db(bind=test_engine)
    yield test_engine
    await test_engine.dispose()

@pytest_asyncio.fixture
async def session(engine):
    async_session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as session:
        yield session

@pytest_asyncio.fixture
async def client(engine):
    async_session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    locks = InProcessBookingLocks()

    async def override_get_session():
        async with async_session() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_booking_locks] = lambda: locks

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()

@pytest_asyncio.fixture
async def clinic(client):
    """A patient, doctor, room and 30-minute treatment created through the API."""
    patient = await client.post("/api/v1/patients", json={
        "first_name": "Ana",
        "last_name": "Lopez",
        "document_number": "12345678A",
        "phone": "600000000",
    })
    doctor = await client.post("/api/v1/doctors", json={"name": "Dr. Ruiz", "specialty": "Physio"})
    room = await client.post("/api/v1/rooms", json={"name": "Room 1"})
    treatment = await client.post("/api/v1/treatments", json={
        "name": "Massage",
        "price": 40,
        "duration": 30,
    })
    assert patient.status_code == 201
    assert doctor.status_code == 201
    assert room.status_code == 201
    assert treatment.status_code == 201
    return {
        "patient": patient.json(),
        "doctor": doctor.json(),
        "room": room.json(),
        "treatment": treatment.json(),
    }
