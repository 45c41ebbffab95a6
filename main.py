"""
Main entry point for ffmedia.

This script configures logging, parses the command-line arguments and runs the
selected sub-command (`waveform`, `transcode`, `frame` or `probe`).
"""
from ffmedia.cli import main


if __name__ == "__main__":
    main()
