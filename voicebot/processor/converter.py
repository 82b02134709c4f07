import asyncio
from pathlib import Path

from voicebot.logging.logger import Log
from voicebot.processor.exceptions import ConversionError


class AudioConverter:
    """Transcodes audio files to Opus in an Ogg container with ffmpeg."""

    def __init__(self, binary: str = "ffmpeg", timeout_seconds: float = 300) -> None:
        self._binary = binary
        self._timeout_seconds = timeout_seconds

    def build_command(self, input_path: Path, output_path: Path) -> list[str]:
        return [
            self._binary,
            "-y",
            "-i",
            str(input_path),
            "-c:a",
            "libopus",
            str(output_path),
        ]

    async def convert(self, input_path: Path, output_path: Path) -> None:
        """Convert ``input_path`` into ``output_path``.

        A non-empty ``output_path`` counts as already converted and the encoder
        is not started. The encoder writes to a ``.part.ogg`` file next to the
        output, which is renamed into place only after a clean exit, so an
        interrupted run never leaves a truncated ``output_path``. The encoder
        is killed when it exceeds the timeout or the calling task is cancelled.

        Raises:
            ConversionError: if the encoder cannot start, fails or times out.
        """
        try:
            converted = _is_converted(output_path)
        except OSError as exc:
            raise ConversionError(f"failed to check output file: {exc}") from exc
        if converted:
            Log.debug(f"Skipping conversion, {output_path} already exists")
            return

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True, mode=0o700)
        except OSError as exc:
            raise ConversionError(f"failed to create output directory: {exc}") from exc

        partial_path = partial_output_path(output_path)
        command = self.build_command(input_path, partial_path)
        Log.debug(f"Running {' '.join(command)}")
        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise ConversionError(f"failed to start {self._binary}: {exc}") from exc

        try:
            _, stderr = await asyncio.wait_for(
                process.communicate(), timeout=self._timeout_seconds
            )
        except asyncio.TimeoutError:
            await _kill(process)
            partial_path.unlink(missing_ok=True)
            raise ConversionError(
                f"{self._binary} timed out after {self._timeout_seconds}s"
            ) from None
        except asyncio.CancelledError:
            # The .part file stays for the next run, which overwrites it.
            await _kill(process)
            raise

        if process.returncode != 0:
            partial_path.unlink(missing_ok=True)
            raise ConversionError(
                f"{self._binary} exited with code {process.returncode}: "
                f"{_last_line(stderr)}"
            )
        try:
            partial_path.replace(output_path)
        except OSError as exc:
            raise ConversionError(f"failed to store converted file: {exc}") from exc
        Log.info(f"Converted {input_path} to {output_path}")


def partial_output_path(output_path: Path) -> Path:
    """Where the encoder writes before the result is moved to ``output_path``."""
    return output_path.with_name(f"{output_path.stem}.part{output_path.suffix}")


def _is_converted(path: Path) -> bool:
    try:
        return path.stat().st_size > 0
    except FileNotFoundError:
        return False


def _last_line(output: bytes | None) -> str:
    lines = (output or b"").decode("utf-8", errors="replace").strip().splitlines()
    return lines[-1] if lines else "no output"


async def _kill(process: asyncio.subprocess.Process) -> None:
    if process.returncode is not None:
        return
    try:
        process.kill()
    except ProcessLookupError:
        return
    await process.wait()
