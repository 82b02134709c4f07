from typing import Any

from voicebot.logging.logger import Log
from voicebot.processor.exceptions import StageError, VoiceBotError
from voicebot.processor.models import IncomingMessage
from voicebot.processor.processor import Processor
from voicebot.telegram.mapping import incoming_from_telethon


class MessageDispatcher:
    """Handle one incoming update and log failures without stopping the service."""

    def __init__(self, processor: Processor) -> None:
        self._processor = processor

    async def handle(self, event: Any) -> None:
        """Event callback registered with the Telegram client."""
        message = event.message
        entities = [e for e in (message.chat, message.sender) if e is not None]
        await self.dispatch(incoming_from_telethon(message, entities))

    async def dispatch(self, message: IncomingMessage) -> None:
        try:
            await self._processor.process(message)
        except StageError as exc:
            Log.error(f"Message {message.id} failed at '{exc.stage}': {exc.cause}")
        except VoiceBotError as exc:
            Log.error(f"Message {message.id} failed: {exc}")
        except Exception as exc:
            Log.exception(f"Message {message.id} failed unexpectedly: {exc}")
