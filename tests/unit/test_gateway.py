from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest
from telethon.errors import RPCError
from telethon.tl.functions.messages import SendMediaRequest
from telethon.tl.types import (
    InputMediaDocument,
    InputMediaUploadedDocument,
    InputPeerChannel,
    InputPeerChat,
    InputPeerUser,
    MessageEntityItalic,
)

from voicebot.processor.exceptions import (
    DownloadError,
    MessageLookupError,
    SendError,
    UploadError,
)
from voicebot.processor.models import ChatRef, Document, IncomingMessage, PeerKind
from voicebot.telegram.gateway import TransferGateway, input_peer

CHANNEL = ChatRef(PeerKind.CHANNEL, 1001)


def _make_gateway() -> tuple[TransferGateway, AsyncMock]:
    client = AsyncMock()
    return TransferGateway(client), client


def _sent_request(client: AsyncMock) -> SendMediaRequest:
    client.assert_awaited_once()
    request = client.await_args.args[0]
    assert isinstance(request, SendMediaRequest)
    return request


class TestInputPeer:
    def test_channel_uses_access_hash(self) -> None:
        peer = input_peer(CHANNEL, {1001: 55})
        assert peer == InputPeerChannel(channel_id=1001, access_hash=55)

    def test_channel_defaults_to_zero_hash(self) -> None:
        peer = input_peer(CHANNEL, {2002: 55})
        assert peer == InputPeerChannel(channel_id=1001, access_hash=0)

    def test_basic_group(self) -> None:
        assert input_peer(ChatRef(PeerKind.CHAT, 7), {}) == InputPeerChat(chat_id=7)

    def test_user(self) -> None:
        peer = input_peer(ChatRef(PeerKind.USER, 8), {8: 9})
        assert peer == InputPeerUser(user_id=8, access_hash=9)


class TestDownloadFile:
    @pytest.mark.asyncio
    async def test_streams_document_to_path(
        self, tmp_path: Path, mp3_document: Document
    ) -> None:
        gateway, client = _make_gateway()
        path = tmp_path / "downloads" / "42.mp3"

        result = await gateway.download_file(mp3_document, path)

        assert result == path
        assert path.parent.is_dir()
        client.download_file.assert_awaited_once()
        location = client.download_file.await_args.args[0]
        assert location.id == 42
        assert location.access_hash == 777
        assert location.file_reference == b"ref-42"
        assert client.download_file.await_args.kwargs["file"] == str(path)

    @pytest.mark.asyncio
    async def test_rpc_failure_raises_download_error(
        self, tmp_path: Path, mp3_document: Document
    ) -> None:
        gateway, client = _make_gateway()
        client.download_file.side_effect = RPCError(None, "FILE_REFERENCE_EXPIRED", 400)

        with pytest.raises(DownloadError, match="42"):
            await gateway.download_file(mp3_document, tmp_path / "42.mp3")

    @pytest.mark.asyncio
    async def test_network_failure_raises_download_error(
        self, tmp_path: Path, mp3_document: Document
    ) -> None:
        gateway, client = _make_gateway()
        client.download_file.side_effect = ConnectionError("reset")

        with pytest.raises(DownloadError):
            await gateway.download_file(mp3_document, tmp_path / "42.mp3")

    @pytest.mark.asyncio
    async def test_directory_failure_raises_download_error(
        self, tmp_path: Path, mp3_document: Document
    ) -> None:
        gateway, client = _make_gateway()
        blocker = tmp_path / "downloads"
        blocker.write_text("not a directory")

        with pytest.raises(DownloadError, match="directory"):
            await gateway.download_file(mp3_document, blocker / "42.mp3")
        client.download_file.assert_not_called()


class TestUploadVoice:
    @pytest.mark.asyncio
    async def test_sends_voice_note(self, tmp_path: Path) -> None:
        gateway, client = _make_gateway()
        client.upload_file.return_value = "uploaded-file"
        ogg = tmp_path / "42.ogg"
        ogg.write_bytes(b"OggS")

        await gateway.upload_voice(CHANNEL, ogg, {1001: 55})

        client.upload_file.assert_awaited_once_with(str(ogg))
        request = _sent_request(client)
        assert request.peer == InputPeerChannel(channel_id=1001, access_hash=55)
        assert isinstance(request.media, InputMediaUploadedDocument)
        assert request.media.file == "uploaded-file"
        assert request.media.mime_type == "audio/ogg"
        assert request.media.attributes[0].voice is True

    @pytest.mark.asyncio
    async def test_missing_file_raises(self, tmp_path: Path) -> None:
        gateway, client = _make_gateway()

        with pytest.raises(UploadError, match="not found"):
            await gateway.upload_voice(CHANNEL, tmp_path / "missing.ogg", {})
        client.upload_file.assert_not_called()

    @pytest.mark.asyncio
    async def test_send_failure_raises(self, tmp_path: Path) -> None:
        gateway, client = _make_gateway()
        client.side_effect = RPCError(None, "CHANNEL_INVALID", 400)
        ogg = tmp_path / "42.ogg"
        ogg.write_bytes(b"OggS")

        with pytest.raises(UploadError):
            await gateway.upload_voice(CHANNEL, ogg, {})


class TestResendWithCaption:
    @pytest.mark.asyncio
    async def test_resends_document_with_caption(self, voice_document: Document) -> None:
        gateway, client = _make_gateway()
        italic = MessageEntityItalic(offset=0, length=4)

        await gateway.resend_with_caption(
            CHANNEL, voice_document, "nice", (italic,), {1001: 55}
        )

        request = _sent_request(client)
        assert request.message == "nice"
        assert request.entities == [italic]
        assert isinstance(request.media, InputMediaDocument)
        assert request.media.id.id == 99
        assert request.media.id.access_hash == 555
        assert request.media.id.file_reference == b"ref-99"

    @pytest.mark.asyncio
    async def test_empty_formatting_sends_no_entities(self, voice_document: Document) -> None:
        gateway, client = _make_gateway()

        await gateway.resend_with_caption(CHANNEL, voice_document, "nice", (), {})

        assert _sent_request(client).entities is None

    @pytest.mark.asyncio
    async def test_failure_raises_send_error(self, voice_document: Document) -> None:
        gateway, client = _make_gateway()
        client.side_effect = ConnectionError("reset")

        with pytest.raises(SendError):
            await gateway.resend_with_caption(CHANNEL, voice_document, "nice", (), {})


class TestGetMessage:
    @pytest.mark.asyncio
    async def test_returns_mapped_message(self) -> None:
        gateway, client = _make_gateway()
        raw = object()
        client.get_messages.return_value = raw
        mapped = IncomingMessage(id=3, chat=CHANNEL)

        with patch(
            "voicebot.telegram.gateway.incoming_from_telethon", return_value=mapped
        ) as mock_map:
            result = await gateway.get_message(CHANNEL, 3, {1001: 55})

        assert result is mapped
        mock_map.assert_called_once_with(raw)
        client.get_messages.assert_awaited_once_with(
            InputPeerChannel(channel_id=1001, access_hash=55), ids=3
        )

    @pytest.mark.asyncio
    async def test_missing_message_raises(self) -> None:
        gateway, client = _make_gateway()
        client.get_messages.return_value = None

        with pytest.raises(MessageLookupError, match="not found"):
            await gateway.get_message(CHANNEL, 3, {})

    @pytest.mark.asyncio
    async def test_rpc_failure_raises(self) -> None:
        gateway, client = _make_gateway()
        client.get_messages.side_effect = RPCError(None, "MESSAGE_IDS_EMPTY", 400)

        with pytest.raises(MessageLookupError):
            await gateway.get_message(CHANNEL, 3, {})
