import asyncio
import getpass
from collections.abc import Callable

from telethon import TelegramClient
from telethon.errors import SessionPasswordNeededError

from voicebot.logging.logger import Log


class QrAuthorizer:
    """Logs the account in by QR code, asking for the cloud password if 2FA is on."""

    def __init__(
        self,
        client: TelegramClient,
        password_prompt: Callable[[str], str] = getpass.getpass,
        show: Callable[[str], None] = print,
    ) -> None:
        self._client = client
        self._password_prompt = password_prompt
        self._show = show

    async def ensure_authorized(self) -> None:
        if await self._client.is_user_authorized():
            return

        Log.info("Session is not authorized, starting QR login")
        qr_login = await self._client.qr_login()
        while True:
            self._show(f"Scan the QR code or open this link on a logged-in device:\n{qr_login.url}")
            try:
                await qr_login.wait()
                break
            except asyncio.TimeoutError:
                Log.debug("QR login token expired, recreating")
                await qr_login.recreate()
            except SessionPasswordNeededError:
                password = await asyncio.to_thread(self._password_prompt, "Cloud password: ")
                await self._client.sign_in(password=password.strip())
                break
        Log.info("QR login completed")
