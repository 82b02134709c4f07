import pytest

from voicebot.processor.models import (
    ChatRef,
    Document,
    DocumentAttribute,
    IncomingMessage,
    PeerKind,
)

TARGET_CHAT_ID = 1001


@pytest.fixture()
def target_chat() -> ChatRef:
    return ChatRef(PeerKind.CHANNEL, TARGET_CHAT_ID)


@pytest.fixture()
def mp3_document() -> Document:
    """An audio document uploaded as a regular file named song.MP3."""
    return Document(
        id=42,
        access_hash=777,
        file_reference=b"ref-42",
        attributes=(
            DocumentAttribute.audio(voice=False),
            DocumentAttribute.filename("song.MP3"),
        ),
    )


@pytest.fixture()
def voice_document() -> Document:
    """A document Telegram shows as a voice note."""
    return Document(
        id=99,
        access_hash=555,
        file_reference=b"ref-99",
        attributes=(DocumentAttribute.audio(voice=True),),
    )


@pytest.fixture()
def incoming_factory(target_chat: ChatRef):
    def _make(**kwargs: object) -> IncomingMessage:
        defaults: dict[str, object] = {
            "id": 10,
            "chat": target_chat,
            "access_hashes": {TARGET_CHAT_ID: 123456},
        }
        defaults.update(kwargs)
        return IncomingMessage(**defaults)  # type: ignore[arg-type]

    return _make
