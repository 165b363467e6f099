"""Tests for data models."""

import pytest
from pydantic import ValidationError

from midivisualizer.models import (
    ActiveNote,
    AppConfig,
    Color,
    ColorScheme,
    NoteEvent,
    NoteEventKind,
    PendingFadeTimer,
    VisualizationStyle,
    get_note_name,
)


@pytest.mark.unit
class TestNoteNames:
    """Note name formatting."""

    @pytest.mark.parametrize(
        "pitch,name",
        [(60, "C4"), (69, "A4"), (71, "B4"), (61, "C#4"), (0, "C-1"), (127, "G9")],
    )
    def test_get_note_name(self, pitch, name):
        assert get_note_name(pitch) == name


@pytest.mark.unit
class TestColor:
    """Color model."""

    def test_from_unit_rgb_clamps(self):
        color = Color.from_unit_rgb(1.5, -0.2, 0.5)
        assert color.to_rgb_tuple() == (255, 0, 128)

    def test_from_hsv_red(self):
        assert Color.from_hsv(0.0, 1.0, 1.0).to_rgb_tuple() == (255, 0, 0)

    def test_blend(self):
        color = Color(r=200, g=100, b=0)
        assert color.blend(Color.black(), 0.5).to_rgb_tuple() == (100, 50, 0)
        assert color.blend(Color.black(), 1.0) == color
        assert color.blend(Color.black(), 0.0) == Color.black()

    def test_to_hex(self):
        assert Color(r=255, g=0, b=16).to_hex() == "#FF0010"

    def test_out_of_range_rejected(self):
        with pytest.raises(ValidationError):
            Color(r=256, g=0, b=0)

    def test_frozen(self):
        color = Color.black()
        with pytest.raises(ValidationError):
            color.r = 10


@pytest.mark.unit
class TestNoteEvent:
    """Decoded note events."""

    def test_constructors(self):
        on = NoteEvent.note_on(60, 100)
        off = NoteEvent.note_off(60)

        assert on.kind is NoteEventKind.NOTE_ON
        assert on.is_note_on
        assert off.kind is NoteEventKind.NOTE_OFF
        assert off.velocity == 0
        assert not off.is_note_on

    def test_hashable_value_type(self):
        assert NoteEvent.note_on(60, 100) == NoteEvent.note_on(60, 100)
        assert len({NoteEvent.note_off(1), NoteEvent.note_off(1)}) == 1


def _note(**overrides) -> ActiveNote:
    values = dict(
        pitch=60,
        velocity=100,
        radius=30.0,
        color=Color.black(),
        fade_duration=2.0,
        created_at=0.0,
    )
    values.update(overrides)
    return ActiveNote(**values)


@pytest.mark.unit
class TestActiveNote:
    """Opacity evaluation of active notes."""

    def test_sounding_note_is_opaque(self):
        note = _note()
        assert note.at(100.0) is note
        assert not note.is_fading

    def test_fading_opacity_linear(self):
        note = _note(released_at=1.0)

        assert note.is_fading
        assert note.at(1.0).opacity == 1.0
        assert note.at(2.0).opacity == pytest.approx(0.5)
        assert note.at(3.0).opacity == 0.0
        assert note.at(9.0).opacity == 0.0

    def test_zero_fade_duration(self):
        assert _note(released_at=0.0, fade_duration=0.0).at(0.0).opacity == 0.0

    def test_name(self):
        assert _note(pitch=69).name == "A4"


@pytest.mark.unit
class TestPendingFadeTimer:
    """Timer cancellation token."""

    def test_cancel_calls_handle_once(self, fake_loop):
        timer = PendingFadeTimer(pitch=60, deadline=2.0)
        timer.handle = fake_loop.call_later(2.0, lambda: None)
        handle = timer.handle

        timer.cancel()
        timer.cancel()

        assert handle.cancelled()
        assert timer.handle is None

    def test_cancel_without_handle(self):
        PendingFadeTimer(pitch=60, deadline=1.0).cancel()


@pytest.mark.unit
class TestAppConfig:
    """Application config validation."""

    def test_defaults(self):
        config = AppConfig()

        assert config.visualization_style == VisualizationStyle.CIRCLES
        assert config.color_scheme == ColorScheme.RAINBOW
        assert config.animation_speed == 1.0
        assert config.show_grid is True
        assert config.fade_duration == 2.0

    @pytest.mark.parametrize("speed", [0.49, 2.01, 0.0, -1.0])
    def test_animation_speed_bounds(self, speed):
        with pytest.raises(ValidationError):
            AppConfig(animation_speed=speed)

    def test_fade_duration_follows_speed(self):
        assert AppConfig(animation_speed=2.0).fade_duration == 1.0
        assert AppConfig(animation_speed=0.5).fade_duration == 4.0

    def test_radius_order(self):
        with pytest.raises(ValidationError):
            AppConfig(min_radius=60, max_radius=50)

    def test_key_velocity_order(self):
        with pytest.raises(ValidationError):
            AppConfig(key_velocity_min=110, key_velocity_max=100)

    def test_enum_from_string(self):
        config = AppConfig.model_validate({"color_scheme": "fire", "visualization_style": "bars"})

        assert config.color_scheme == ColorScheme.FIRE
        assert config.visualization_style == VisualizationStyle.BARS

    def test_save_and_load(self, temp_dir):
        path = temp_dir / "config.json"
        AppConfig(color_scheme=ColorScheme.OCEAN, show_grid=False).save(path)

        loaded = AppConfig.load_or_default(path)

        assert loaded.color_scheme == ColorScheme.OCEAN
        assert loaded.show_grid is False

    def test_load_or_default_missing_file(self, temp_dir):
        path = temp_dir / "missing.json"

        assert AppConfig.load_or_default(path) == AppConfig()
        assert not path.exists()


@pytest.mark.unit
class TestColorSchemeCycle:
    def test_next_wraps(self):
        assert ColorScheme.RAINBOW.next() == ColorScheme.FIRE
        assert ColorScheme.FIRE.next() == ColorScheme.OCEAN
        assert ColorScheme.OCEAN.next() == ColorScheme.RAINBOW
