"""Shared test fixtures for the dicework test suite.

dice  (function scope)
    A factory for ``ScriptedRandom`` sources. Each scripted draw is either a
    face value, or a ``(sides, value)`` pair when the test also wants to
    check which die was asked for. Every draw must be used by the end of the
    test, so a roll that takes fewer dice than expected fails too.

async_client  (function scope)
    An AsyncClient wired to the FastAPI app.

scripted_client  (function scope)
    Like async_client, but takes the draws first: the app's random source is
    overridden with a ScriptedRandom for the duration of the test.
"""

from __future__ import annotations

from collections.abc import Sequence

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from dicework.main import app
from dicework.routers.rolls import get_random


class ScriptedRandom:
    """A random source that replays fixed draws and checks the dice asked for."""

    def __init__(self, draws: Sequence[int | tuple[int, int]]) -> None:
        self._draws = list(draws)
        self.requested: list[int] = []

    @property
    def remaining(self) -> int:
        return len(self._draws)

    def randint(self, a: int, b: int) -> int:
        assert a == 1, f"dice are rolled from 1, not {a}"
        assert self._draws, f"no scripted draw left for a d{b}"
        draw = self._draws.pop(0)
        if isinstance(draw, tuple):
            sides, draw = draw
            assert b == sides, f"expected a d{sides}, got a d{b}"
        assert 1 <= draw <= b, f"scripted draw {draw} does not fit a d{b}"
        self.requested.append(b)
        return draw


@pytest.fixture
def dice():
    created: list[ScriptedRandom] = []

    def _script(*draws: int | tuple[int, int]) -> ScriptedRandom:
        source = ScriptedRandom(draws)
        created.append(source)
        return source

    yield _script

    for source in created:
        assert source.remaining == 0, f"{source.remaining} scripted draws were never used"


@pytest_asyncio.fixture
async def async_client():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def scripted_client(dice):
    """Yields ``connect(*draws)``, which returns a client whose rolls use those draws."""
    clients: list[AsyncClient] = []

    def _connect(*draws: int | tuple[int, int]) -> AsyncClient:
        source = dice(*draws)
        app.dependency_overrides[get_random] = lambda: source
        client = AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
        clients.append(client)
        return client

    yield _connect

    app.dependency_overrides.pop(get_random, None)
    for client in clients:
        await client.aclose()
