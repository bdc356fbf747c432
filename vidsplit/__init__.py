"""
vidsplit - trim, transform and split videos into fixed-length segments

This package provides the planning and orchestration core that:
- Validates a trim range and segment length
- Resolves rotation/scale selections into an ffmpeg filter graph
- Chooses between a stream-copy split and per-segment re-encoding
- Runs ffmpeg jobs in parallel and aggregates their results
- Stages the output directory between runs

ffmpeg itself is treated as a black box; vidsplit only builds its
argument vectors and observes exit status, elapsed time and errors.
"""

__version__ = "0.1.0"
