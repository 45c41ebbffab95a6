"""
This package contains the core domain models of ffmedia.

The domain layer describes what an operation should produce, independently of
how ffmpeg is run.

Modules:
    exceptions.py: Custom exception types, so that callers can tell a rejected
                   configuration value apart from a failed ffmpeg run.
    formats.py: Audio and video output formats with their validated, chainable
                setters.
    media.py: `MediaSource`, the immutable input reference, and `MediaFile`,
              which wraps `ffprobe` to expose the duration and streams of a file.
"""
