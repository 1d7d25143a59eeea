"""Test doubles shared across the suite."""

from __future__ import annotations

import asyncio
from typing import Callable, Dict, List, Optional, Sequence

from where_i_traveled.domain.models import GeocodedItem, GeoLocation


class FakeGeocoder:
    """GeocoderPort double.

    Responses are looked up by query text. A query with a gate blocks
    until the gate is set, which keeps a request "in flight". With
    ignore_cancel, a cancelled request still returns its response, like
    a transport that cannot be cancelled.
    """

    def __init__(
        self,
        responses: Optional[Dict[str, Sequence[GeocodedItem]]] = None,
        errors: Optional[Dict[str, Exception]] = None,
        ignore_cancel: bool = False,
    ) -> None:
        self.responses = dict(responses or {})
        self.errors = dict(errors or {})
        self.ignore_cancel = ignore_cancel
        self.gates: Dict[str, asyncio.Event] = {}
        self.calls: List[str] = []

    def hold(self, text: str) -> asyncio.Event:
        gate = asyncio.Event()
        self.gates[text] = gate
        return gate

    async def search(self, text: str) -> Sequence[GeocodedItem]:
        self.calls.append(text)
        gate = self.gates.get(text)
        if gate is not None:
            try:
                await gate.wait()
            except asyncio.CancelledError:
                if not self.ignore_cancel:
                    raise
        if text in self.errors:
            raise self.errors[text]
        return tuple(self.responses.get(text, ()))


def item(name: Optional[str], latitude: float, longitude: float) -> GeocodedItem:
    return GeocodedItem(location=GeoLocation(latitude, longitude), name=name)


async def eventually(predicate: Callable[[], bool], timeout: float = 1.0) -> None:
    """Poll until predicate() is true or fail after timeout."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met before timeout")
        await asyncio.sleep(0.005)
