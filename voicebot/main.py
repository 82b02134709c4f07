import argparse
import asyncio
import sys

from voicebot.bot.auth import QrAuthorizer
from voicebot.bot.client import build_client
from voicebot.config.settings import Settings
from voicebot.logging.logger import Log
from voicebot.processor.processor import build_processor
from voicebot.telegram.gateway import TransferGateway
from voicebot.worker.dispatcher import MessageDispatcher
from voicebot.worker.worker import Worker


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="voicebot",
        description="Re-send audio files from a Telegram chat as voice notes.",
    )
    parser.add_argument(
        "--fill-peer-storage",
        action="store_true",
        help="fill peer storage from dialogs before listening",
    )
    return parser.parse_args(argv)


async def run(settings: Settings, fill_peers: bool) -> None:
    """Build dependencies -> start the worker loop."""
    client = build_client(settings)
    processor = build_processor(settings, TransferGateway(client))
    worker = Worker(
        client=client,
        dispatcher=MessageDispatcher(processor),
        authorizer=QrAuthorizer(client),
        fill_peers=fill_peers,
    )
    await worker.run()


def main(argv: list[str] | None = None) -> int:
    """Entry point: load settings -> configure logging -> run until interrupted."""
    args = parse_args(argv)
    try:
        settings = Settings()  # type: ignore[call-arg]
        Log.configure(
            settings.log_level,
            log_file=settings.log_file,
            max_bytes=settings.log_file_max_bytes,
            backup_count=settings.log_file_backup_count,
        )
        print(f"Storing session in {settings.session_dir}, logs in {settings.log_file}")
        asyncio.run(run(settings, args.fill_peer_storage))
    except KeyboardInterrupt:
        print("\rClosed")
        return 0
    except Exception as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    print("Done")
    return 0


def cli() -> None:
    sys.exit(main())


if __name__ == "__main__":
    cli()
