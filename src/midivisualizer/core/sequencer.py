"""Demo sequencer: plays a short scripted melody through the port adapter."""

import asyncio
import logging
from collections.abc import Sequence
from typing import Optional

from midivisualizer.midi import MidiPortAdapter

logger = logging.getLogger(__name__)

# (pitch, seconds held): C4 E4 G4 E4 C4
DEMO_MELODY: tuple[tuple[int, float], ...] = (
    (60, 0.5),
    (64, 0.5),
    (67, 0.5),
    (64, 0.5),
    (60, 1.0),
)
DEMO_VELOCITY = 80
DEMO_GAP = 0.1


class DemoSequencer:
    """
    Plays a melody through `send_note_on`/`send_note_off`, exactly like live input.

    The melody runs as an asyncio task on the presentation loop and waits
    with `asyncio.sleep`, so incoming events keep being handled meanwhile.

    Calling `play()` while a demo is running restarts it: the running task
    is cancelled, sends the note-off for the note it was holding, and only
    then does the new run send its first note-on.
    """

    def __init__(
        self,
        adapter: MidiPortAdapter,
        loop: asyncio.AbstractEventLoop,
        melody: Sequence[tuple[int, float]] = DEMO_MELODY,
        velocity: int = DEMO_VELOCITY,
        gap: float = DEMO_GAP,
    ):
        self._adapter = adapter
        self._loop = loop
        self.melody = tuple(melody)
        self.velocity = velocity
        self.gap = gap
        self._task: Optional[asyncio.Task] = None

    @property
    def is_playing(self) -> bool:
        return self._task is not None and not self._task.done()

    def play(self) -> asyncio.Task:
        """Start the demo (restarting it if one is running) and return its task."""
        if self.is_playing:
            logger.info("Demo restarted")
            self._task.cancel()
        self._task = self._loop.create_task(self._run(), name="demo-sequencer")
        return self._task

    def stop(self) -> None:
        """Cancel a running demo; its held note is released."""
        if self.is_playing:
            logger.info("Demo stopped")
            self._task.cancel()

    async def _run(self) -> None:
        held: Optional[int] = None
        logger.info(f"Demo started ({len(self.melody)} notes)")
        try:
            for pitch, duration in self.melody:
                self._adapter.send_note_on(pitch, self.velocity)
                held = pitch
                await asyncio.sleep(duration)
                self._adapter.send_note_off(pitch)
                held = None
                await asyncio.sleep(self.gap)
        except asyncio.CancelledError:
            if held is not None:
                self._adapter.send_note_off(held)
            raise
        logger.info("Demo finished")
