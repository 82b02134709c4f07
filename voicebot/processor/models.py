from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class AttributeKind(str, Enum):
    FILENAME = "filename"
    AUDIO = "audio"
    OTHER = "other"


@dataclass(frozen=True)
class DocumentAttribute:
    """Tagged document attribute: a file name, an audio marker or anything else."""

    kind: AttributeKind
    file_name: str = ""
    voice: bool = False
    type_name: str = ""

    @classmethod
    def filename(cls, file_name: str) -> "DocumentAttribute":
        return cls(kind=AttributeKind.FILENAME, file_name=file_name)

    @classmethod
    def audio(cls, voice: bool = False) -> "DocumentAttribute":
        return cls(kind=AttributeKind.AUDIO, voice=voice)

    @classmethod
    def other(cls, type_name: str) -> "DocumentAttribute":
        return cls(kind=AttributeKind.OTHER, type_name=type_name)


@dataclass(frozen=True)
class Document:
    """Read-only handle of a remote Telegram document."""

    id: int
    access_hash: int
    file_reference: bytes
    attributes: tuple[DocumentAttribute, ...] = ()
    dc_id: int | None = None


class PeerKind(str, Enum):
    CHANNEL = "channel"
    CHAT = "chat"
    USER = "user"


@dataclass(frozen=True)
class ChatRef:
    kind: PeerKind
    id: int


@dataclass(frozen=True)
class IncomingMessage:
    """Subset of a Telegram message the classifier and pipeline work with.

    ``formatting`` holds the library's message entity objects untouched so they
    can be sent back verbatim. ``access_hashes`` maps chat ids to the access
    hashes delivered with the update.
    """

    id: int
    chat: ChatRef | None
    document: Document | None = None
    reply_to_msg_id: int | None = None
    text: str = ""
    formatting: tuple[Any, ...] = ()
    access_hashes: Mapping[int, int] = field(default_factory=dict)


class AudioFormat(str, Enum):
    MP3 = "mp3"
    OGG = "ogg"


@dataclass(frozen=True)
class Ignore:
    reason: str = ""


@dataclass(frozen=True)
class ConvertAndSend:
    document: Document
    audio_format: AudioFormat


@dataclass(frozen=True)
class ReplyVoiceResend:
    document: Document
    caption: str
    formatting: tuple[Any, ...] = ()


Outcome = Ignore | ConvertAndSend | ReplyVoiceResend
