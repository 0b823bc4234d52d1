"""Audio/video container conversion through the ffmpeg executable."""

from __future__ import annotations

import asyncio
import logging
import shutil
import tempfile
from pathlib import Path

from mimebridge.config.models import FFmpegConfig
from mimebridge.errors import ConversionError, HandlerInitError
from mimebridge.formats.mime import with_extension
from mimebridge.formats.models import FileData, FormatDescriptor
from mimebridge.handlers.base import FormatHandler

logger = logging.getLogger(__name__)

# (display name, format code, mime)
_MEDIA_FORMATS: tuple[tuple[str, str, str], ...] = (
    ("MP4 Video", "mp4", "video/mp4"),
    ("WebM Video", "webm", "video/webm"),
    ("AVI Video", "avi", "video/x-msvideo"),
    ("MKV Video", "mkv", "video/x-matroska"),
    ("MOV Video", "mov", "video/quicktime"),
    ("FLV Video", "flv", "video/x-flv"),
    ("WMV Video", "wmv", "video/x-ms-wmv"),
    ("MPEG Video", "mpeg", "video/mpeg"),
    ("OGV Video", "ogv", "video/ogg"),
    ("3GP Video", "3gp", "video/3gpp"),
    ("Animated GIF", "gif", "image/gif"),
    ("MP3 Audio", "mp3", "audio/mpeg"),
    ("WAV Audio", "wav", "audio/wav"),
    ("AAC Audio", "aac", "audio/aac"),
    ("OGG Audio", "ogg", "audio/ogg"),
    ("FLAC Audio", "flac", "audio/flac"),
    ("M4A Audio", "m4a", "audio/mp4"),
    ("WMA Audio", "wma", "audio/x-ms-wma"),
    ("AIFF Audio", "aiff", "audio/aiff"),
    ("WebM Audio", "weba", "audio/webm"),
)

FFMPEG_FORMATS: tuple[FormatDescriptor, ...] = tuple(
    FormatDescriptor(
        name=name, format=code, extension=code, mime=mime,
        supports_input=True, supports_output=True, internal=code,
    )
    for name, code, mime in _MEDIA_FORMATS
)


class FFmpegHandler(FormatHandler):
    """Re-muxes and transcodes media by shelling out to ffmpeg."""

    name = "ffmpeg"

    def __init__(self, config: FFmpegConfig | None = None) -> None:
        super().__init__()
        self._config = config or FFmpegConfig()
        self._binary: str | None = None

    async def initialize(self) -> None:
        binary = shutil.which(self._config.binary)
        if binary is None:
            raise HandlerInitError(self.name, f"{self._config.binary!r} not found on PATH")

        code, output = await self._run([binary, "-hide_banner", "-version"])
        if code != 0:
            raise HandlerInitError(self.name, f"'{binary} -version' exited with {code}")
        version = output.splitlines()[0] if output else "unknown version"
        logger.info("Using %s", version)

        self._binary = binary
        self._declare(FFMPEG_FORMATS)

    def build_args(self, input_name: str, output_name: str, output_format: FormatDescriptor) -> list[str]:
        """ffmpeg arguments (without the executable) for one conversion."""
        args = ["-hide_banner", "-loglevel", "error", "-i", input_name]
        if output_format.mime == "video/mp4":
            args += ["-c:v", "libx264", "-pix_fmt", "yuv420p"]
        elif output_format.mime == "video/webm":
            args += ["-c:v", "libvpx-vp9", "-c:a", "libopus"]
        elif output_format.mime == "image/gif":
            args += ["-vf", self._config.gif_filter]
        elif output_format.canonical_mime.startswith("audio/"):
            args += ["-vn"]
        args += ["-y", output_name]
        return args

    async def convert(
        self,
        files: list[FileData],
        input_format: FormatDescriptor,
        output_format: FormatDescriptor,
    ) -> list[FileData]:
        if self._binary is None:
            raise ConversionError("FFmpeg not initialized")

        out: list[FileData] = []
        with tempfile.TemporaryDirectory(prefix="mimebridge-ffmpeg-") as tmp:
            work = Path(tmp)
            for index, f in enumerate(files):
                src = work / f"input{index}.{input_format.extension}"
                dst = work / f"output{index}.{output_format.extension}"
                src.write_bytes(f.data)

                code, output = await self._run(
                    [self._binary, *self.build_args(str(src), str(dst), output_format)]
                )
                if code != 0 or not dst.is_file():
                    detail = output.strip().splitlines()[-1] if output.strip() else f"exit code {code}"
                    raise ConversionError(f"ffmpeg failed for {f.name}: {detail}")

                out.append(
                    FileData(name=with_extension(f.name, output_format.extension), data=dst.read_bytes())
                )
        return out

    @staticmethod
    async def _run(cmd: list[str]) -> tuple[int, str]:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
        )
        try:
            stdout, _ = await process.communicate()
        except BaseException:
            # Cancelled or timed out: the child must not outlive the step.
            if process.returncode is None:
                logger.warning("Killing ffmpeg (pid %d) after interrupted step", process.pid)
                process.kill()
                await process.wait()
            raise
        return process.returncode, stdout.decode("utf-8", errors="replace")
