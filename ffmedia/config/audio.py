"""
Configuration settings related to audio formats and waveform rendering.

This module defines the default encoding parameters of every audio format and
the defaults used when rendering a waveform picture of an audio track.
"""

# ======================================================================================
# Audio Encoding Parameters
# ======================================================================================

# The bitrate, in kilobits per second, used by every audio format until the
# caller sets another one.
DEFAULT_AUDIO_KILO_BITRATE = 128

# Codecs accepted by each concrete audio format. The first entry is the
# format's default codec.
MP3_AUDIO_CODECS = ("libmp3lame",)
AAC_AUDIO_CODECS = ("libfdk_aac", "aac")
FLAC_AUDIO_CODECS = ("flac",)
VORBIS_AUDIO_CODECS = ("vorbis",)
WAV_AUDIO_CODECS = ("pcm_s16le",)

# The native vorbis encoder is still flagged experimental by ffmpeg.
VORBIS_EXTRA_PARAMS = ("-strict", "-2")


# ======================================================================================
# Waveform Settings
# ======================================================================================

# ffmpeg filter that renders the whole audio track into a single picture.
WAVEFORM_FILTER_NAME = "showwavespic"

# Waveform color used when none is given. Saving a black waveform as JPEG
# gives a completely black picture, so PNG output is recommended.
WAVEFORM_DEFAULT_COLOR = "#000000"

WAVEFORM_DEFAULT_WIDTH = 640
WAVEFORM_DEFAULT_HEIGHT = 120

# A waveform color is an HTML color string: '#' and six hexadecimal digits.
WAVEFORM_COLOR_PATTERN = r"^#[0-9a-fA-F]{6}$"
