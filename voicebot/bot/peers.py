from telethon import TelegramClient

from voicebot.logging.logger import Log


async def fill_peer_storage(client: TelegramClient) -> int:
    """Walk every dialog once so the session caches its entities.

    Returns the number of dialogs seen.
    """
    count = 0
    async for _dialog in client.iter_dialogs():
        count += 1
    Log.info(f"Peer storage filled from {count} dialogs")
    return count
