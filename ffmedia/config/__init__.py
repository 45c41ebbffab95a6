"""
Configuration Package for ffmedia.

This package centralizes the static configuration settings of the library.
Keeping them apart from the application logic makes it easy to adjust
defaults without touching the core code.

This package includes settings for:
- Locations of the external `ffmpeg` and `ffprobe` executables, optionally
  overridden from a user YAML file.
- Logging formats and command logging.
- Default parameters of the audio and video formats and of waveform rendering.
"""
