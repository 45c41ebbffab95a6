"""
Utilities Package for ffmedia.

Modules:
    - format_utils.py: Timecodes as ffmpeg writes them and human-readable
      file sizes for log messages.
"""
