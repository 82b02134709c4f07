from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from telethon import TelegramClient
from telethon.errors import RPCError
from telethon.helpers import generate_random_long
from telethon.tl.functions.messages import SendMediaRequest
from telethon.tl.types import (
    DocumentAttributeAudio,
    InputDocument,
    InputDocumentFileLocation,
    InputMediaDocument,
    InputMediaUploadedDocument,
    InputPeerChannel,
    InputPeerChat,
    InputPeerUser,
)

from voicebot.logging.logger import Log
from voicebot.processor.exceptions import (
    DownloadError,
    MessageLookupError,
    SendError,
    UploadError,
)
from voicebot.processor.models import ChatRef, Document, IncomingMessage, PeerKind
from voicebot.telegram.mapping import incoming_from_telethon

VOICE_MIME_TYPE = "audio/ogg"


def input_peer(chat: ChatRef, access_hashes: Mapping[int, int]) -> Any:
    """Build the input peer for a chat from the access hashes of an update.

    An unknown access hash becomes 0, which Telegram rejects for channels.
    """
    if chat.kind is PeerKind.CHAT:
        return InputPeerChat(chat_id=chat.id)
    access_hash = access_hashes.get(chat.id, 0)
    if chat.kind is PeerKind.USER:
        return InputPeerUser(user_id=chat.id, access_hash=access_hash)
    return InputPeerChannel(channel_id=chat.id, access_hash=access_hash)


class TransferGateway:
    """Moves files between local storage and Telegram and sends media messages."""

    def __init__(self, client: TelegramClient) -> None:
        self._client = client

    async def download_file(self, document: Document, path: Path) -> Path:
        """Stream a remote document to ``path``.

        Raises:
            DownloadError: if the directory cannot be created or the fetch fails.
        """
        try:
            path.parent.mkdir(parents=True, exist_ok=True, mode=0o700)
        except OSError as exc:
            raise DownloadError(f"failed to create download directory: {exc}") from exc

        location = InputDocumentFileLocation(
            id=document.id,
            access_hash=document.access_hash,
            file_reference=document.file_reference,
            thumb_size="",
        )
        try:
            await self._client.download_file(
                location, file=str(path), dc_id=document.dc_id
            )
        except (RPCError, OSError) as exc:
            raise DownloadError(f"failed to download document {document.id}: {exc}") from exc
        Log.info(f"Downloaded document {document.id} to {path}")
        return path

    async def upload_voice(
        self,
        chat: ChatRef,
        ogg_path: Path,
        access_hashes: Mapping[int, int],
    ) -> None:
        """Upload a local Ogg file and send it to ``chat`` as a voice note.

        Raises:
            UploadError: if the file is missing or the upload or send fails.
        """
        if not ogg_path.is_file():
            raise UploadError(f"voice file not found: {ogg_path}")
        try:
            uploaded = await self._client.upload_file(str(ogg_path))
            media = InputMediaUploadedDocument(
                file=uploaded,
                mime_type=VOICE_MIME_TYPE,
                attributes=[DocumentAttributeAudio(duration=0, voice=True)],
            )
            await self._client(
                SendMediaRequest(
                    peer=input_peer(chat, access_hashes),
                    media=media,
                    message="",
                    random_id=generate_random_long(),
                )
            )
        except (RPCError, OSError) as exc:
            raise UploadError(f"failed to send voice {ogg_path}: {exc}") from exc
        Log.info(f"Sent voice {ogg_path} to {chat.kind.value} {chat.id}")

    async def resend_with_caption(
        self,
        chat: ChatRef,
        document: Document,
        caption: str,
        formatting: Sequence[Any],
        access_hashes: Mapping[int, int],
    ) -> None:
        """Send an already uploaded document again with a caption and its formatting.

        Raises:
            SendError: if Telegram rejects the message.
        """
        media = InputMediaDocument(
            id=InputDocument(
                id=document.id,
                access_hash=document.access_hash,
                file_reference=document.file_reference,
            )
        )
        try:
            await self._client(
                SendMediaRequest(
                    peer=input_peer(chat, access_hashes),
                    media=media,
                    message=caption,
                    entities=list(formatting) or None,
                    random_id=generate_random_long(),
                )
            )
        except (RPCError, OSError) as exc:
            raise SendError(f"failed to resend document {document.id}: {exc}") from exc
        Log.info(f"Resent document {document.id} with caption to {chat.kind.value} {chat.id}")

    async def get_message(
        self,
        chat: ChatRef,
        message_id: int,
        access_hashes: Mapping[int, int],
    ) -> IncomingMessage:
        """Fetch a single message from ``chat``.

        Raises:
            MessageLookupError: if the request fails or the message does not exist.
        """
        try:
            message = await self._client.get_messages(
                input_peer(chat, access_hashes), ids=message_id
            )
        except (RPCError, OSError) as exc:
            raise MessageLookupError(f"failed to fetch message {message_id}: {exc}") from exc
        if message is None:
            raise MessageLookupError(f"message {message_id} not found")
        return incoming_from_telethon(message)
