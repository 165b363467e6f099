"""Note lifecycle state machine.

Each pitch moves independently through three states:

    IDLE --note on--> SOUNDING --note off--> FADING_OUT --timer--> IDLE
                        ^  |                     |
                        +--+ note on             | note on
                        ^------------------------+

A note-on always replaces the active note for its pitch. If that pitch is
fading, its removal timer is cancelled in the same step, so a stale timer
can never remove the newer note. A note-off starts the fade and schedules
exactly one removal timer; further note-offs are ignored.

All state is confined to the presentation event loop: the port adapter
delivers events there, and fade timers are `loop.call_later` handles that
fire there. No locks are needed.
"""

import asyncio
import logging
from dataclasses import replace
from typing import Any, Optional

from midivisualizer.models import (
    MAX_ANIMATION_SPEED,
    MIN_ANIMATION_SPEED,
    ActiveNote,
    AppConfig,
    ColorScheme,
    NoteEvent,
    NoteState,
    PendingFadeTimer,
)
from midivisualizer.protocols import ConfigEvent, NoteLifecycleEvent, NoteObserver
from midivisualizer.utils import ObserverManager

from .styling import DEFAULT_MAX_RADIUS, DEFAULT_MIN_RADIUS, note_color, velocity_to_radius

logger = logging.getLogger(__name__)

DEFAULT_BASE_FADE_DURATION = 2.0

# Config fields the dispatcher mirrors
_STYLE_KEYS = ("color_scheme", "animation_speed", "base_fade_duration", "min_radius", "max_radius")


class NoteLifecycleDispatcher:
    """
    Owns the set of active notes and their fade-out timers.

    Implements NoteEventSink (for the port adapter) and ConfigObserver
    (so color scheme and animation speed follow the settings).

    Invariants:
        - At most one ActiveNote and at most one PendingFadeTimer per pitch
        - A PendingFadeTimer exists for a pitch iff its note is fading out
        - A note leaves the active set only when its own timer fires or on clear()
    """

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        color_scheme: ColorScheme = ColorScheme.RAINBOW,
        animation_speed: float = 1.0,
        base_fade_duration: float = DEFAULT_BASE_FADE_DURATION,
        min_radius: float = DEFAULT_MIN_RADIUS,
        max_radius: float = DEFAULT_MAX_RADIUS,
    ):
        """
        Initialize the dispatcher.

        Args:
            loop: Presentation event loop (timers are scheduled on it)
            color_scheme: Color policy for new notes
            animation_speed: Fade speed multiplier in [0.5, 2.0]
            base_fade_duration: Fade time in seconds at speed 1.0
            min_radius: Radius of a velocity-0 note
            max_radius: Radius of a velocity-127 note
        """
        self._loop = loop
        self.color_scheme = ColorScheme(color_scheme)
        self.animation_speed = animation_speed
        self.base_fade_duration = base_fade_duration
        self.min_radius = min_radius
        self.max_radius = max_radius

        self._notes: dict[int, ActiveNote] = {}
        self._timers: dict[int, PendingFadeTimer] = {}
        self._observers = ObserverManager[NoteObserver](observer_type_name="note")

    @classmethod
    def from_config(cls, loop: asyncio.AbstractEventLoop, config: AppConfig) -> "NoteLifecycleDispatcher":
        """Create a dispatcher using the style settings of `config`."""
        return cls(
            loop,
            color_scheme=config.color_scheme,
            animation_speed=config.animation_speed,
            base_fade_duration=config.base_fade_duration,
            min_radius=config.min_radius,
            max_radius=config.max_radius,
        )

    # =================================================================
    # Settings
    # =================================================================

    @property
    def animation_speed(self) -> float:
        return self._animation_speed

    @animation_speed.setter
    def animation_speed(self, value: float) -> None:
        """Set the fade speed multiplier; applies to notes released from now on."""
        if not MIN_ANIMATION_SPEED <= value <= MAX_ANIMATION_SPEED:
            raise ValueError(
                f"animation_speed must be between {MIN_ANIMATION_SPEED} and "
                f"{MAX_ANIMATION_SPEED}, got {value}"
            )
        self._animation_speed = float(value)

    @property
    def fade_duration(self) -> float:
        """Fade time for a note released now."""
        return self.base_fade_duration / self._animation_speed

    def on_config_event(self, event: ConfigEvent, **kwargs: Any) -> None:
        """Mirror style settings from the config service."""
        config: Optional[AppConfig] = kwargs.get("config")
        if config is None:
            return
        if event == ConfigEvent.CONFIG_UPDATED and not set(kwargs.get("keys", ())) & set(_STYLE_KEYS):
            return

        self.color_scheme = ColorScheme(config.color_scheme)
        self.animation_speed = config.animation_speed
        self.base_fade_duration = config.base_fade_duration
        self.min_radius = config.min_radius
        self.max_radius = config.max_radius
        logger.debug(
            f"Dispatcher style updated: scheme={self.color_scheme.value}, "
            f"speed={self._animation_speed}"
        )

    # =================================================================
    # Event System
    # =================================================================

    def register_observer(self, observer: NoteObserver) -> None:
        """Register an observer for note lifecycle transitions."""
        self._observers.register(observer)

    def unregister_observer(self, observer: NoteObserver) -> None:
        """Unregister an observer."""
        self._observers.unregister(observer)

    def _notify(self, event: NoteLifecycleEvent, pitch: Optional[int]) -> None:
        self._observers.notify("on_note_event", event, pitch)

    # =================================================================
    # Transitions
    # =================================================================

    def handle_note_event(self, event: NoteEvent) -> None:
        """Apply one decoded note event (NoteEventSink)."""
        if event.is_note_on:
            self.note_on(event.pitch, event.velocity)
        else:
            self.note_off(event.pitch)

    def note_on(self, pitch: int, velocity: int) -> None:
        """
        Start or retrigger the note for `pitch`.

        Any pending fade timer is cancelled and the old note discarded
        before the new one is stored, as one step on the loop.
        """
        timer = self._timers.pop(pitch, None)
        if timer is not None:
            timer.cancel()
        previous = self._notes.pop(pitch, None)

        self._notes[pitch] = ActiveNote(
            pitch=pitch,
            velocity=velocity,
            radius=velocity_to_radius(velocity, self.min_radius, self.max_radius),
            color=note_color(self.color_scheme, pitch, velocity),
            fade_duration=self.fade_duration,
            created_at=self._loop.time(),
        )

        if previous is None:
            logger.debug(f"Note {pitch} on (velocity {velocity})")
            self._notify(NoteLifecycleEvent.NOTE_STARTED, pitch)
        else:
            logger.debug(
                f"Note {pitch} retriggered (velocity {velocity}, "
                f"{'cancelled fade' if timer is not None else 'was sounding'})"
            )
            self._notify(NoteLifecycleEvent.NOTE_RETRIGGERED, pitch)

    def note_off(self, pitch: int) -> None:
        """
        Begin the fade-out of the note for `pitch`.

        No-op when the pitch is idle or already fading.
        """
        note = self._notes.get(pitch)
        if note is None:
            logger.debug(f"Ignoring note off for idle pitch {pitch}")
            return
        if note.is_fading:
            return

        fade_duration = self.fade_duration
        now = self._loop.time()
        self._notes[pitch] = replace(note, fade_duration=fade_duration, released_at=now)

        timer = PendingFadeTimer(pitch=pitch, deadline=now + fade_duration)
        timer.handle = self._loop.call_later(fade_duration, self._on_fade_timer, timer)
        self._timers[pitch] = timer

        logger.debug(f"Note {pitch} off, fading over {fade_duration:.2f}s")
        self._notify(NoteLifecycleEvent.NOTE_RELEASED, pitch)

    def _on_fade_timer(self, timer: PendingFadeTimer) -> None:
        """Remove a faded note, unless the timer was superseded."""
        if self._timers.get(timer.pitch) is not timer:
            logger.debug(f"Ignoring superseded fade timer for pitch {timer.pitch}")
            return

        del self._timers[timer.pitch]
        timer.handle = None
        self._notes.pop(timer.pitch, None)
        logger.debug(f"Note {timer.pitch} removed")
        self._notify(NoteLifecycleEvent.NOTE_REMOVED, timer.pitch)

    def clear(self) -> None:
        """Cancel every pending timer, then release every active note."""
        for timer in self._timers.values():
            timer.cancel()
        timer_count = len(self._timers)
        self._timers.clear()

        note_count = len(self._notes)
        self._notes.clear()

        if timer_count or note_count:
            logger.info(f"Cleared {note_count} active note(s) and {timer_count} fade timer(s)")
        self._notify(NoteLifecycleEvent.NOTES_CLEARED, None)

    # =================================================================
    # Read-only state
    # =================================================================

    def snapshot(self, now: Optional[float] = None) -> list[ActiveNote]:
        """
        Active notes in start order, with opacity evaluated at `now`.

        Args:
            now: Loop time to evaluate fades at (defaults to loop.time())
        """
        now = self._loop.time() if now is None else now
        return [note.at(now) for note in self._notes.values()]

    def get_note(self, pitch: int) -> Optional[ActiveNote]:
        """Stored note for `pitch` (opacity not evaluated), or None."""
        return self._notes.get(pitch)

    def state_of(self, pitch: int) -> NoteState:
        """Current lifecycle state of `pitch`."""
        if pitch in self._timers:
            return NoteState.FADING_OUT
        if pitch in self._notes:
            return NoteState.SOUNDING
        return NoteState.IDLE

    def has_pending_timer(self, pitch: int) -> bool:
        return pitch in self._timers

    @property
    def pending_timer_count(self) -> int:
        return len(self._timers)

    @property
    def active_pitches(self) -> list[int]:
        return list(self._notes)

    @property
    def sounding_pitches(self) -> list[int]:
        """Pitches whose note has not been released yet."""
        return [pitch for pitch, note in self._notes.items() if not note.is_fading]

    def __len__(self) -> int:
        return len(self._notes)
