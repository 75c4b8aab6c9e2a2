"""
Video processing infrastructure.

Handles server-side keyframe extraction using FFmpeg so the vision
model can look at a few stills from the uploaded clip.
"""

from .processor import (
    ExtractedFrame,
    FFmpegVideoProcessor,
    FrameExtractionError,
    MockVideoProcessor,
    VideoInfo,
    VideoProcessor,
    create_video_processor,
)

__all__ = [
    "ExtractedFrame",
    "FFmpegVideoProcessor",
    "FrameExtractionError",
    "MockVideoProcessor",
    "VideoInfo",
    "VideoProcessor",
    "create_video_processor",
]
