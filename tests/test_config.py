"""Tests for reading the user configuration file."""

from ffmedia.config.common import load_user_config


class TestLoadUserConfig:
    """Tests for load_user_config."""

    def test_missing_file(self, tmp_path):
        """Without a file the defaults apply."""
        assert load_user_config(tmp_path / "config.user.yaml") == {}

    def test_reads_ffmpeg_section(self, tmp_path):
        """Known keys of the ffmpeg section are returned."""
        path = tmp_path / "config.user.yaml"
        path.write_text(
            "ffmpeg:\n"
            "  ffmpeg_binary: /opt/ffmpeg/bin/ffmpeg\n"
            "  ffprobe_binary: /opt/ffmpeg/bin/ffprobe\n"
            "  timeout: 600\n"
            "  threads: 4\n"
            "  unknown: ignored\n",
            encoding="utf-8",
        )
        assert load_user_config(path) == {
            "ffmpeg_binary": "/opt/ffmpeg/bin/ffmpeg",
            "ffprobe_binary": "/opt/ffmpeg/bin/ffprobe",
            "timeout": 600,
            "threads": 4,
        }

    def test_empty_file(self, tmp_path):
        """An empty file is the same as no file."""
        path = tmp_path / "config.user.yaml"
        path.write_text("", encoding="utf-8")
        assert load_user_config(path) == {}

    def test_invalid_yaml(self, tmp_path):
        """Unparseable files are ignored."""
        path = tmp_path / "config.user.yaml"
        path.write_text("ffmpeg: [unclosed\n", encoding="utf-8")
        assert load_user_config(path) == {}

    def test_malformed_section(self, tmp_path):
        """A section that is not a mapping is ignored."""
        path = tmp_path / "config.user.yaml"
        path.write_text("ffmpeg: /usr/bin/ffmpeg\n", encoding="utf-8")
        assert load_user_config(path) == {}
