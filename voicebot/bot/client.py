from telethon import TelegramClient

from voicebot.config.settings import Settings


def build_client(settings: Settings) -> TelegramClient:
    """Create a client with a persistent SQLite session in the session directory."""
    settings.session_dir.mkdir(parents=True, exist_ok=True, mode=0o700)
    return TelegramClient(
        str(settings.session_dir / "session"),
        settings.app_id,
        settings.app_hash,
        flood_sleep_threshold=settings.flood_sleep_threshold,
        catch_up=settings.catch_up,
    )
