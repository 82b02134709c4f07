from telethon import TelegramClient, events

from voicebot.bot.auth import QrAuthorizer
from voicebot.bot.peers import fill_peer_storage
from voicebot.logging.logger import Log
from voicebot.worker.dispatcher import MessageDispatcher


def display_name(first_name: str | None, username: str | None) -> str:
    name = first_name or ""
    if username:
        name = f"{name} (@{username})"
    return name


class Worker:
    """Session loop: connect -> authorize -> warm up peers -> listen for updates."""

    def __init__(
        self,
        client: TelegramClient,
        dispatcher: MessageDispatcher,
        authorizer: QrAuthorizer,
        fill_peers: bool = False,
    ) -> None:
        self._client = client
        self._dispatcher = dispatcher
        self._authorizer = authorizer
        self._fill_peers = fill_peers

    async def run(self) -> None:
        """Run until the client disconnects or the task is cancelled."""
        await self._client.connect()
        try:
            await self._authorizer.ensure_authorized()
            await self._announce_self()

            if self._fill_peers:
                print("Filling peer storage from dialogs to cache entities")
                await fill_peer_storage(self._client)
                print("Filled")

            self._client.add_event_handler(self._dispatcher.handle, events.NewMessage())
            print("Listening for updates. Interrupt (Ctrl+C) to stop.")
            Log.info("Worker started, listening for updates")
            await self._client.run_until_disconnected()
        finally:
            await self._client.disconnect()
            Log.info("Worker stopped")

    async def _announce_self(self) -> None:
        me = await self._client.get_me()
        print("Current user:", display_name(me.first_name, me.username))
        Log.info(
            f"Login: first_name={me.first_name} last_name={me.last_name} "
            f"username={me.username} id={me.id}"
        )
