"""Tests for split settings."""
from pathlib import Path

import pytest

from vidsplit.config import SplitSettings
from vidsplit.exceptions import ConfigurationError


def test_defaults_are_valid() -> None:
    settings = SplitSettings.from_environment()
    assert settings.extension == "mp4"
    assert settings.video_codec
    assert isinstance(settings.output_dir, Path)


def test_overrides(tmp_path: Path) -> None:
    settings = SplitSettings.from_environment(output_dir=str(tmp_path), crf=18, max_workers=None)
    assert settings.output_dir == tmp_path
    assert settings.crf == 18


def test_unknown_setting_rejected() -> None:
    with pytest.raises(ConfigurationError, match="bitrate"):
        SplitSettings.from_environment(bitrate="5M")


@pytest.mark.parametrize("overrides", [
    dict(crf=52),
    dict(crf=-1),
    dict(gop_size=0),
    dict(max_workers=0),
    dict(extension="m p4"),
    dict(ffmpeg_binary=""),
    dict(settle_delay=-1.0),
    dict(stagger_delay=float("nan")),
    dict(poll_interval=0),
    dict(memory_threshold=0),
    dict(memory_threshold=101),
])
def test_invalid_settings(overrides) -> None:
    with pytest.raises(ConfigurationError):
        SplitSettings.from_environment(**overrides)
