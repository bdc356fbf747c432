"""Encode job construction

Responsibilities:
- Choose the execution strategy for a split
- Build one stream-copy job over the whole range when no filter is active
- Build one re-encode job per planned segment when a filter is active
- Name outputs so a natural sort reproduces temporal order
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Tuple

from .command_builders import build_reencode_command, build_stream_copy_command
from .config import SplitSettings
from .models import EncodeJob, SegmentPlan, VideoAsset
from .transform import ResolvedTransform

logger = logging.getLogger(__name__)


class Strategy(Enum):
    STREAM_COPY = "stream-copy"
    REENCODE = "re-encode"


@dataclass(frozen=True)
class JobSet:
    strategy: Strategy
    jobs: Tuple[EncodeJob, ...]

    def __len__(self) -> int:
        return len(self.jobs)


def output_name(stem: str, index: int, extension: str) -> str:
    """<stem><index:03d>.<ext>, matching the segment muxer's %03d pattern."""
    return f"{stem}{index:03d}.{extension}"


def output_pattern(output_dir: Path, stem: str, extension: str) -> Path:
    """Segment muxer template; literal % in the stem is escaped as %%."""
    return output_dir / f"{stem.replace('%', '%%')}%03d.{extension}"


def build_jobs(
    plan: SegmentPlan,
    asset: VideoAsset,
    resolved: ResolvedTransform,
    output_dir: Path,
    settings: SplitSettings
) -> JobSet:
    """
    Convert a segment plan into encode jobs.

    Args:
        plan: Segment layout for the selected range
        asset: Source video
        resolved: Resolved rotation/scale filters
        output_dir: Directory the outputs are written to
        settings: Encoder settings

    Returns:
        JobSet with the chosen strategy; empty when the plan has no segments
    """
    strategy = Strategy.REENCODE if resolved.uses_filter else Strategy.STREAM_COPY
    if plan.segment_count == 0:
        logger.info("Nothing selected; no jobs to build")
        return JobSet(strategy, ())

    if strategy is Strategy.STREAM_COPY:
        pattern = output_pattern(output_dir, asset.stem, settings.extension)
        cmd = build_stream_copy_command(
            asset.uri, pattern, plan.start_ms, plan.selected_ms,
            plan.segment_length_ms, settings.ffmpeg_binary
        )
        jobs = (EncodeJob(
            index=0,
            source_offset_ms=plan.start_ms,
            duration_ms=plan.selected_ms,
            filter_graph=None,
            output_path=pattern,
            command=tuple(cmd),
        ),)
    else:
        graph = resolved.filter_graph
        jobs = []
        for index, (offset, duration) in enumerate(zip(plan.offsets(), plan.durations())):
            output_file = output_dir / output_name(asset.stem, index, settings.extension)
            cmd = build_reencode_command(
                asset.uri, output_file, offset, duration, plan.segment_length_ms, graph,
                video_codec=settings.video_codec,
                crf=settings.crf,
                gop_size=settings.gop_size,
                ffmpeg_binary=settings.ffmpeg_binary
            )
            jobs.append(EncodeJob(
                index=index,
                source_offset_ms=offset,
                duration_ms=duration,
                filter_graph=graph,
                output_path=output_file,
                command=tuple(cmd),
            ))
        jobs = tuple(jobs)

    logger.info("Built %d %s job(s) for %d segment(s)",
                len(jobs), strategy.value, plan.segment_count)
    return JobSet(strategy, jobs)
