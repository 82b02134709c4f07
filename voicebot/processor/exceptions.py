class VoiceBotError(Exception):
    """Base exception for errors that abandon processing of a single message."""


class TransferError(VoiceBotError):
    """Raised when moving a file to or from Telegram fails."""


class DownloadError(TransferError):
    """Raised when a document cannot be downloaded to local storage."""


class UploadError(TransferError):
    """Raised when a local voice file cannot be uploaded and sent."""


class SendError(TransferError):
    """Raised when an existing document cannot be re-sent with a caption."""


class MessageLookupError(VoiceBotError):
    """Raised when a replied-to message cannot be fetched."""


class ConversionError(VoiceBotError):
    """Raised when the external encoder fails, times out or cannot be started."""


class StageError(VoiceBotError):
    """Wraps a failure with the label of the pipeline stage it happened in."""

    def __init__(self, stage: str, cause: Exception) -> None:
        super().__init__(f"{stage}: {cause}")
        self.stage = stage
        self.cause = cause
