"""
Services Package for ffmedia.

This package contains the "service layer": the classes that turn a configured
operation into an ffmpeg process and report its outcome.

- **Driver (`FFMpegDriver`, `FFProbeDriver`):**
  Spawns ffmpeg with a list of tokens, streams its standard error to progress
  listeners and raises `DriverExecutionError` when the run fails.

- **Orchestrator (`CommandOrchestrator`):**
  Assembles preamble, filter and trailer tokens in a fixed order, runs them
  through the driver, removes partial output on failure and raises
  `ExecutionFailed`.

- **Media types (`Audio`, `Video`, `Waveform`, `Frame`):**
  The operations offered to callers.

- **Progress (`ProgressListener`):**
  Parses ffmpeg status lines into `ProgressInfo` snapshots.
"""
