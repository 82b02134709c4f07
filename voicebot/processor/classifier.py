from voicebot.logging.logger import Log
from voicebot.processor.exceptions import MessageLookupError, StageError
from voicebot.processor.inspector import get_file_name, is_audio_file, is_voice_message
from voicebot.processor.models import (
    AudioFormat,
    ChatRef,
    ConvertAndSend,
    Ignore,
    IncomingMessage,
    Outcome,
    PeerKind,
    ReplyVoiceResend,
)
from voicebot.telegram.gateway import TransferGateway


class MessageClassifier:
    """Decides what to do with an incoming message.

    Rules, first match wins:
      1. message outside the target chat -> ignore
      2. audio document named *.mp3 / *.ogg -> convert (if needed) and send as voice
      3. text reply to a voice note -> resend the voice note with the reply as caption
      4. anything else -> ignore
    """

    def __init__(self, target_chat: int, gateway: TransferGateway) -> None:
        self._target_chat = target_chat
        self._gateway = gateway

    async def classify(self, message: IncomingMessage) -> Outcome:
        chat = message.chat
        if chat is None or not self._is_target(chat):
            return Ignore("not the target chat")

        audio = self._classify_audio(message)
        if audio is not None:
            return audio

        if message.reply_to_msg_id is not None and message.text:
            return await self._classify_reply(message, chat, message.reply_to_msg_id)

        return Ignore("no audio attachment or voice reply")

    def _is_target(self, chat: ChatRef) -> bool:
        # Private chats live in a separate id space and never match.
        return chat.kind in (PeerKind.CHANNEL, PeerKind.CHAT) and chat.id == self._target_chat

    def _classify_audio(self, message: IncomingMessage) -> ConvertAndSend | None:
        document = message.document
        if document is None or not is_audio_file(document):
            return None
        file_name = get_file_name(document)
        Log.info(f"Message {message.id} carries audio file {file_name}")
        suffix = file_name.lower()
        if suffix.endswith(".mp3"):
            return ConvertAndSend(document, AudioFormat.MP3)
        if suffix.endswith(".ogg"):
            return ConvertAndSend(document, AudioFormat.OGG)
        return None

    async def _classify_reply(
        self,
        message: IncomingMessage,
        chat: ChatRef,
        reply_to_msg_id: int,
    ) -> Outcome:
        try:
            replied = await self._gateway.get_message(
                chat, reply_to_msg_id, message.access_hashes
            )
        except MessageLookupError as exc:
            raise StageError("get replied message", exc) from exc

        if replied.document is None or not is_voice_message(replied.document):
            return Ignore("reply is not to a voice message")
        return ReplyVoiceResend(
            document=replied.document,
            caption=message.text,
            formatting=message.formatting,
        )
