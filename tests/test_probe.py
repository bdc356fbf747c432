"""Unit tests for source probing

ffprobe itself is mocked; these tests cover duration selection and
error mapping.
"""

import unittest
from pathlib import Path
from tempfile import TemporaryDirectory
from unittest.mock import patch

import ffmpeg

from vidsplit.exceptions import ConfigurationError, ProbeError
from vidsplit.probe import get_duration_ms, probe_asset


class TestGetDuration(unittest.TestCase):
    """Test cases for duration extraction"""
    def test_prefers_video_stream_duration(self):
        info = {
            "streams": [
                {"codec_type": "audio", "duration": "99.0"},
                {"codec_type": "video", "duration": "12.345"},
            ],
            "format": {"duration": "13.0"},
        }
        self.assertEqual(get_duration_ms(info), 12345)

    def test_falls_back_to_format_duration(self):
        info = {"streams": [{"codec_type": "video"}], "format": {"duration": "61.5"}}
        self.assertEqual(get_duration_ms(info), 61500)

    def test_no_video_stream(self):
        with self.assertRaises(ProbeError):
            get_duration_ms({"streams": [{"codec_type": "audio", "duration": "5"}]})

    def test_no_duration(self):
        with self.assertRaises(ProbeError):
            get_duration_ms({"streams": [{"codec_type": "video", "duration": "N/A"}], "format": {}})


class TestProbeAsset(unittest.TestCase):
    """Test cases for probe_asset"""
    def setUp(self):
        self._tmp = TemporaryDirectory()
        self.video = Path(self._tmp.name) / "holiday.mp4"
        self.video.write_bytes(b"\x00")

    def tearDown(self):
        self._tmp.cleanup()

    @patch("vidsplit.probe.ffmpeg.probe")
    def test_probe_asset(self, mock_probe):
        mock_probe.return_value = {
            "streams": [{"codec_type": "video", "duration": "125.0"}],
            "format": {"duration": "125.0"},
        }
        asset = probe_asset(self.video)
        mock_probe.assert_called_once_with(str(self.video), cmd="ffprobe")
        self.assertEqual(asset.uri, str(self.video))
        self.assertEqual(asset.filename, "holiday.mp4")
        self.assertEqual(asset.stem, "holiday")
        self.assertEqual(asset.duration_ms, 125000)

    @patch("vidsplit.probe.ffmpeg.probe")
    def test_ffprobe_error(self, mock_probe):
        mock_probe.side_effect = ffmpeg.Error("ffprobe", b"", b"moov atom not found")
        with self.assertRaises(ProbeError) as ctx:
            probe_asset(self.video)
        self.assertIn("moov atom not found", ctx.exception.message)

    def test_missing_file(self):
        with self.assertRaises(ConfigurationError):
            probe_asset(Path(self._tmp.name) / "missing.mp4")


if __name__ == "__main__":
    unittest.main()
