"""
Video processing service using FFmpeg.

Turns an uploaded clip into the few keyframes the coach looks at:
1. Extract video metadata (duration, fps, resolution) with FFprobe
2. Pick timestamps with a KeyframeStrategy
3. Extract one JPEG per timestamp with FFmpeg

FFmpeg works best with file paths, so every operation writes the clip
to a temporary file and cleans up afterwards.
"""

import asyncio
import json
import logging
import os
import subprocess
import tempfile
from dataclasses import dataclass
from typing import Protocol

from ...core.coaching.frames import KeyframeStrategy


logger = logging.getLogger(__name__)


class FrameExtractionError(Exception):
    """Raised when the clip can't be probed or no frame could be extracted."""
    pass


@dataclass
class VideoInfo:
    """Video metadata extracted via FFprobe."""
    duration_seconds: float
    width: int
    height: int
    fps: float
    codec: str
    file_size_bytes: int


@dataclass
class ExtractedFrame:
    """A frame extracted from video with its timestamp."""
    timestamp_seconds: float
    frame_number: int
    data: bytes  # jpeg image data


class VideoProcessor(Protocol):
    """Protocol for video processing operations."""

    async def extract_keyframes(
        self,
        video_data: bytes,
        strategy: KeyframeStrategy = KeyframeStrategy(),
        suffix: str = ".mp4",
    ) -> list[ExtractedFrame]:
        ...


class FFmpegVideoProcessor:
    """Video processor using FFmpeg/FFprobe binaries on PATH."""

    def __init__(self, ffmpeg_path: str = "ffmpeg", ffprobe_path: str = "ffprobe"):
        self._ffmpeg = ffmpeg_path
        self._ffprobe = ffprobe_path

        try:
            result = subprocess.run(
                [self._ffmpeg, "-version"],
                capture_output=True,
                text=True,
                timeout=5
            )
        except FileNotFoundError:
            raise RuntimeError(
                "FFmpeg not found. Install with: apt-get install ffmpeg"
            )
        if result.returncode != 0:
            raise RuntimeError("FFmpeg not working properly")
        logger.info("FFmpeg video processor initialized")

    async def extract_keyframes(
        self,
        video_data: bytes,
        strategy: KeyframeStrategy = KeyframeStrategy(),
        suffix: str = ".mp4",
    ) -> list[ExtractedFrame]:
        """
        Extract one JPEG per strategy timestamp.

        Frames that fail individually are skipped; if none succeed the
        whole extraction fails.
        """
        with tempfile.NamedTemporaryFile(suffix=suffix, delete=False) as tmp:
            tmp.write(video_data)
            video_path = tmp.name

        try:
            info = await self._probe(video_path, len(video_data))
            timestamps = strategy.calculate_timestamps(info.duration_seconds)
            frames = await self._extract_at(video_path, timestamps)
        finally:
            os.unlink(video_path)

        if not frames:
            raise FrameExtractionError("No frames could be extracted from the video")

        logger.info(
            "Extracted keyframes",
            extra={"count": len(frames), "duration": info.duration_seconds},
        )
        return frames

    async def _probe(self, path: str, size_bytes: int) -> VideoInfo:
        cmd = [
            self._ffprobe,
            "-v", "quiet",
            "-print_format", "json",
            "-show_format",
            "-show_streams",
            path
        ]

        try:
            result = await asyncio.to_thread(
                subprocess.run,
                cmd,
                capture_output=True,
                text=True,
                timeout=30
            )
        except subprocess.TimeoutExpired as e:
            raise FrameExtractionError("FFprobe timed out") from e

        if result.returncode != 0:
            raise FrameExtractionError(f"FFprobe failed: {result.stderr}")

        try:
            info = json.loads(result.stdout)
        except json.JSONDecodeError as e:
            raise FrameExtractionError("FFprobe returned invalid JSON") from e

        video_stream = next(
            (s for s in info.get("streams", []) if s.get("codec_type") == "video"),
            None,
        )
        if not video_stream:
            raise FrameExtractionError("No video stream found")

        # fps can be a fraction like "30000/1001"
        fps_str = video_stream.get("r_frame_rate", "30/1")
        try:
            if "/" in fps_str:
                num, denom = fps_str.split("/")
                fps = float(num) / float(denom)
            else:
                fps = float(fps_str)
        except (ValueError, ZeroDivisionError):
            fps = 0.0

        duration = float(info.get("format", {}).get("duration", 0) or 0)
        if duration == 0:
            duration = float(video_stream.get("duration", 0) or 0)

        return VideoInfo(
            duration_seconds=duration,
            width=int(video_stream.get("width", 0)),
            height=int(video_stream.get("height", 0)),
            fps=fps,
            codec=video_stream.get("codec_name", "unknown"),
            file_size_bytes=size_bytes,
        )

    async def _extract_at(self, video_path: str, timestamps: list[float]) -> list[ExtractedFrame]:
        frames: list[ExtractedFrame] = []

        with tempfile.TemporaryDirectory() as output_dir:
            for i, ts in enumerate(timestamps):
                output_path = os.path.join(output_dir, f"frame_{i:04d}.jpg")

                # -ss before -i for fast seeking
                cmd = [
                    self._ffmpeg,
                    "-ss", f"{ts:.3f}",
                    "-i", video_path,
                    "-frames:v", "1",
                    "-q:v", "3",
                    "-y",
                    output_path
                ]

                try:
                    result = await asyncio.to_thread(
                        subprocess.run,
                        cmd,
                        capture_output=True,
                        timeout=10
                    )
                except subprocess.TimeoutExpired:
                    logger.warning("Frame extraction timed out", extra={"timestamp": ts})
                    continue

                if result.returncode == 0 and os.path.exists(output_path):
                    with open(output_path, "rb") as f:
                        frames.append(ExtractedFrame(
                            timestamp_seconds=ts,
                            frame_number=i,
                            data=f.read(),
                        ))
                else:
                    logger.warning(
                        "Failed to extract frame",
                        extra={"timestamp": ts, "stderr": result.stderr.decode(errors="replace")[-500:]},
                    )

        return frames


# A valid 1x1 JPEG, so placeholder frames still pass image checks downstream
PLACEHOLDER_JPEG = bytes.fromhex(
    "ffd8ffe000104a46494600010100000100010000ffdb00430008060607060508"
    "0707070909080a0c140d0c0b0b0c1912130f141d1a1f1e1d1a1c1c20242e2720"
    "222c231c1c2837292c30313434341f27393d38323c2e333432ffc0000b080001"
    "000101011100ffc4001f00000105010101010101000000000000000001020304"
    "05060708090a0bffc400b5100002010303020403050504040000017d01020300"
    "041105122131410613516107227114328191a1082342b1c11552d1f024336272"
    "82090a161718191a25262728292a3435363738393a434445464748494a535455"
    "565758595a636465666768696a737475767778797a838485868788898a929394"
    "95969798999aa2a3a4a5a6a7a8a9aab2b3b4b5b6b7b8b9bac2c3c4c5c6c7c8c9"
    "cad2d3d4d5d6d7d8d9dae1e2e3e4e5e6e7e8e9eaf1f2f3f4f5f6f7f8f9faffda"
    "0008010100003f00fbd328a0028a2803ffd9"
)


class MockVideoProcessor:
    """
    Video processor for local development without FFmpeg.

    Pretends every clip is 10 seconds long and returns placeholder
    frames at the strategy's timestamps.
    """

    duration_seconds = 10.0

    def __init__(self) -> None:
        logger.info("Initialized mock video processor")

    async def extract_keyframes(
        self,
        video_data: bytes,
        strategy: KeyframeStrategy = KeyframeStrategy(),
        suffix: str = ".mp4",
    ) -> list[ExtractedFrame]:
        return [
            ExtractedFrame(timestamp_seconds=ts, frame_number=i, data=PLACEHOLDER_JPEG)
            for i, ts in enumerate(strategy.calculate_timestamps(self.duration_seconds))
        ]


def create_video_processor(mock_mode: bool = False) -> VideoProcessor:
    """
    Factory function for video processor.

    Args:
        mock_mode: If True, return mock processor (no FFmpeg required)
    """
    if mock_mode:
        return MockVideoProcessor()

    return FFmpegVideoProcessor()
