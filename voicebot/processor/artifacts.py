from collections.abc import Iterable
from pathlib import Path

from voicebot.logging.logger import Log
from voicebot.processor.models import AudioFormat


def artifact_path(root: Path, document_id: int, extension: str) -> Path:
    """Build path to a local artifact: {root}/{document_id}.{extension}"""
    return root / f"{document_id}.{extension}"


class ArtifactStore:
    """Resolves local paths for downloaded and converted audio files."""

    def __init__(self, downloads_dir: Path, ogg_dir: Path) -> None:
        self._downloads_dir = downloads_dir
        self._ogg_dir = ogg_dir

    def mp3_path(self, document_id: int) -> Path:
        return artifact_path(self._downloads_dir, document_id, AudioFormat.MP3.value)

    def ogg_path(self, document_id: int) -> Path:
        return artifact_path(self._ogg_dir, document_id, AudioFormat.OGG.value)

    def download_path(self, document_id: int, audio_format: AudioFormat) -> Path:
        """Ogg files are downloaded straight into the voice directory."""
        if audio_format is AudioFormat.OGG:
            return self.ogg_path(document_id)
        return self.mp3_path(document_id)

    def discard(self, paths: Iterable[Path]) -> None:
        """Delete artifacts that are no longer needed. Missing files are skipped."""
        for path in paths:
            try:
                path.unlink(missing_ok=True)
            except OSError as exc:
                Log.warning(f"Could not remove artifact {path}: {exc}")
                continue
            Log.debug(f"Removed artifact {path}")
