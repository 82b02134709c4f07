from collections.abc import Iterable
from typing import Any

from telethon.tl.types import (
    Document as TLDocument,
    DocumentAttributeAudio,
    DocumentAttributeFilename,
    Message,
    MessageMediaDocument,
    MessageReplyHeader,
    PeerChannel,
    PeerChat,
    PeerUser,
)

from voicebot.processor.models import (
    ChatRef,
    Document,
    DocumentAttribute,
    IncomingMessage,
    PeerKind,
)


def attribute_from_telethon(attr: Any) -> DocumentAttribute:
    if isinstance(attr, DocumentAttributeFilename):
        return DocumentAttribute.filename(attr.file_name)
    if isinstance(attr, DocumentAttributeAudio):
        return DocumentAttribute.audio(voice=bool(attr.voice))
    return DocumentAttribute.other(type(attr).__name__)


def document_from_telethon(message: Message) -> Document | None:
    """Extract the document from a message's media, if it has one."""
    media = getattr(message, "media", None)
    if not isinstance(media, MessageMediaDocument):
        return None
    document = media.document
    if not isinstance(document, TLDocument):
        return None
    return Document(
        id=document.id,
        access_hash=document.access_hash,
        file_reference=document.file_reference,
        attributes=tuple(attribute_from_telethon(a) for a in document.attributes),
        dc_id=document.dc_id,
    )


def chat_from_peer(peer: Any) -> ChatRef | None:
    if isinstance(peer, PeerChannel):
        return ChatRef(PeerKind.CHANNEL, peer.channel_id)
    if isinstance(peer, PeerChat):
        return ChatRef(PeerKind.CHAT, peer.chat_id)
    if isinstance(peer, PeerUser):
        return ChatRef(PeerKind.USER, peer.user_id)
    return None


def access_hashes_from_entities(entities: Iterable[Any]) -> dict[int, int]:
    """Map entity ids to access hashes. The first entity with a given id wins."""
    hashes: dict[int, int] = {}
    for entity in entities:
        access_hash = getattr(entity, "access_hash", None)
        if access_hash is not None:
            hashes.setdefault(entity.id, access_hash)
    return hashes


def incoming_from_telethon(
    message: Message,
    entities: Iterable[Any] = (),
) -> IncomingMessage:
    reply_to = getattr(message, "reply_to", None)
    reply_to_msg_id = (
        reply_to.reply_to_msg_id if isinstance(reply_to, MessageReplyHeader) else None
    )
    return IncomingMessage(
        id=message.id,
        chat=chat_from_peer(message.peer_id),
        document=document_from_telethon(message),
        reply_to_msg_id=reply_to_msg_id,
        text=getattr(message, "message", None) or "",
        formatting=tuple(getattr(message, "entities", None) or ()),
        access_hashes=access_hashes_from_entities(entities),
    )
