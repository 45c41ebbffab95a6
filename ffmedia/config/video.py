"""
Configuration settings related to video formats and frame extraction.
"""

# ======================================================================================
# Video Encoding Parameters
# ======================================================================================

# The video bitrate, in kilobits per second, used until the caller sets another one.
DEFAULT_VIDEO_KILO_BITRATE = 1000

# Resize computations round dimensions to a multiple of this value, most
# encoders refuse odd frame sizes.
DEFAULT_MODULUS = 16

# Audio and video codecs accepted by the concrete video formats. The first
# entry is the default.
X264_AUDIO_CODECS = ("aac", "copy", "libvo_aacenc", "libfaac", "libmp3lame", "libfdk_aac")
X264_VIDEO_CODECS = ("libx264",)
X264_PASSES = 2

WEBM_AUDIO_CODECS = ("libvorbis", "copy")
WEBM_VIDEO_CODECS = ("libvpx", "libvpx-vp9")
WEBM_EXTRA_PARAMS = ("-f", "webm")

WMV_AUDIO_CODECS = ("wmav2",)
WMV_VIDEO_CODECS = ("wmv2",)
WMV_EXTRA_PARAMS = ("-f", "asf")

OGG_AUDIO_CODECS = ("libvorbis",)
OGG_VIDEO_CODECS = ("libtheora",)

# Prefix of the statistics files written by ffmpeg between encoding passes.
PASS_LOG_PREFIX = "ffmedia-pass"


# ======================================================================================
# Frame Extraction
# ======================================================================================

# Number of frames written by a still image extraction.
FRAME_COUNT = 1

# Muxer used for still images.
FRAME_IMAGE_MUXER = "image2"
