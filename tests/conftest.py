"""Pytest fixtures for tests."""

from collections import deque
from pathlib import Path
from tempfile import TemporaryDirectory

import pytest

from midivisualizer.exceptions import PortUnavailableError
from midivisualizer.models import AppConfig


class FakeTimerHandle:
    """TimerHandle stand-in returned by FakeLoop.call_later."""

    def __init__(self, when: float, callback, args):
        self.when = when
        self.callback = callback
        self.args = args
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    def cancelled(self) -> bool:
        return self._cancelled


class FakeLoop:
    """
    Manual-clock stand-in for the presentation event loop.

    Implements the loop methods the dispatcher and port adapter use:
    time(), call_later() and call_soon_threadsafe(). Nothing runs until
    the test calls run_ready() or advance().
    """

    def __init__(self):
        self.now = 0.0
        self._timers: list[FakeTimerHandle] = []
        self._ready: deque = deque()
        self._closed = False

    def time(self) -> float:
        return self.now

    def call_later(self, delay, callback, *args):
        handle = FakeTimerHandle(self.now + delay, callback, args)
        self._timers.append(handle)
        return handle

    def call_soon_threadsafe(self, callback, *args):
        if self._closed:
            raise RuntimeError("Event loop is closed")
        self._ready.append((callback, args))

    def close(self) -> None:
        self._closed = True

    def run_ready(self) -> int:
        """Run queued callbacks; returns how many ran."""
        count = 0
        while self._ready:
            callback, args = self._ready.popleft()
            callback(*args)
            count += 1
        return count

    def advance(self, seconds: float) -> None:
        """Move the clock forward, firing due timers in deadline order."""
        target = self.now + seconds
        self.run_ready()
        while True:
            due = [t for t in self._timers if not t.cancelled() and t.when <= target]
            if not due:
                break
            timer = min(due, key=lambda t: t.when)
            self._timers.remove(timer)
            self.now = timer.when
            timer.callback(*timer.args)
            self.run_ready()
        self.now = target

    @property
    def ready_count(self) -> int:
        return len(self._ready)

    @property
    def pending_timers(self) -> list[FakeTimerHandle]:
        return [t for t in self._timers if not t.cancelled()]


class FakeSource:
    def __init__(self, name: str, backend: "FakeMidiBackend"):
        self.name = name
        self.sent: list[list[int]] = []
        self._backend = backend
        self.is_open = True

    def send(self, message) -> None:
        if self.is_open:
            self.sent.append(list(message))

    def close(self) -> None:
        if self.is_open:
            self.is_open = False
            self._backend.released.append("source")


class FakeDestination:
    def __init__(self, name: str, on_packet, backend: "FakeMidiBackend"):
        self.name = name
        self.on_packet = on_packet
        self._backend = backend
        self.is_open = True

    def inject(self, data) -> None:
        """Simulate the platform delivering a packet."""
        self.on_packet(list(data))

    def close(self) -> None:
        if self.is_open:
            self.is_open = False
            self._backend.released.append("destination")


class FakeMidiClient:
    """In-memory VirtualMidiClient replacement."""

    def __init__(self, name: str, backend: "FakeMidiBackend"):
        self.name = name
        self._backend = backend
        self.source: FakeSource | None = None
        self.destination: FakeDestination | None = None
        self.closed = False

    def create_source(self, name: str) -> FakeSource:
        if "source" in self._backend.refuse:
            raise PortUnavailableError(name, original_error="refused by test")
        self.source = FakeSource(name, self._backend)
        return self.source

    def create_destination(self, name: str, on_packet) -> FakeDestination:
        if "destination" in self._backend.refuse:
            raise PortUnavailableError(name, original_error="refused by test")
        self.destination = FakeDestination(name, on_packet, self._backend)
        return self.destination

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            self._backend.released.append("client")


class FakeMidiBackend:
    """Client factory recording every client and the order endpoints are released."""

    def __init__(self, refuse: tuple[str, ...] = ()):
        self.refuse = refuse
        self.clients: list[FakeMidiClient] = []
        self.released: list[str] = []

    def __call__(self, name: str) -> FakeMidiClient:
        client = FakeMidiClient(name, self)
        self.clients.append(client)
        return client

    @property
    def client(self) -> FakeMidiClient:
        return self.clients[-1]


@pytest.fixture
def temp_dir():
    """Create a temporary directory that gets cleaned up."""
    with TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def fake_loop():
    """Manual-clock presentation loop."""
    return FakeLoop()


@pytest.fixture
def midi_backend():
    """Fake platform MIDI service that accepts every endpoint."""
    return FakeMidiBackend()


@pytest.fixture
def refusing_midi_backend():
    """Fake platform MIDI service that refuses the virtual destination."""
    return FakeMidiBackend(refuse=("destination",))


@pytest.fixture
def config():
    """Default configuration without sound."""
    return AppConfig(sound_enabled=False)
