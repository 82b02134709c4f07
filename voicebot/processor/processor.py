from collections.abc import Sequence

from voicebot.config.settings import Settings
from voicebot.logging.logger import Log
from voicebot.processor.artifacts import ArtifactStore
from voicebot.processor.classifier import MessageClassifier
from voicebot.processor.converter import AudioConverter
from voicebot.processor.exceptions import StageError, VoiceBotError
from voicebot.processor.models import (
    AudioFormat,
    ConvertAndSend,
    Ignore,
    IncomingMessage,
    Outcome,
    ReplyVoiceResend,
)
from voicebot.processor.pipeline import PipelineContext, PipelineStep
from voicebot.processor.steps import (
    CleanupArtifactsStep,
    ConvertStep,
    DownloadStep,
    ResendWithCaptionStep,
    UploadVoiceStep,
)
from voicebot.telegram.gateway import TransferGateway


class Processor:
    """Classifies a message and runs the pipeline for its outcome.

    Pipelines:
      mp3:   download -> convert -> send voice
      ogg:   download -> send voice
      reply: send voice with caption
    The first failing step stops the pipeline and is reported as a StageError.
    """

    def __init__(
        self,
        classifier: MessageClassifier,
        mp3_steps: Sequence[PipelineStep],
        ogg_steps: Sequence[PipelineStep],
        reply_steps: Sequence[PipelineStep],
    ) -> None:
        self._classifier = classifier
        self._mp3_steps = list(mp3_steps)
        self._ogg_steps = list(ogg_steps)
        self._reply_steps = list(reply_steps)

    async def process(self, message: IncomingMessage) -> Outcome:
        outcome = await self._classifier.classify(message)
        if isinstance(outcome, Ignore):
            Log.debug(f"Ignoring message {message.id}: {outcome.reason}")
            return outcome

        context = PipelineContext(message=message, outcome=outcome)
        for step in self._steps_for(outcome):
            try:
                context = await step.run(context)
            except VoiceBotError as exc:
                raise StageError(step.stage, exc) from exc
        Log.info(f"Message {message.id} processed: {type(outcome).__name__}")
        return outcome

    def _steps_for(self, outcome: ConvertAndSend | ReplyVoiceResend) -> list[PipelineStep]:
        if isinstance(outcome, ReplyVoiceResend):
            return self._reply_steps
        if outcome.audio_format is AudioFormat.MP3:
            return self._mp3_steps
        return self._ogg_steps


def build_processor(settings: Settings, gateway: TransferGateway) -> Processor:
    """Build a Processor wired to the configured directories and encoder."""
    store = ArtifactStore(settings.downloads_dir, settings.ogg_dir)
    converter = AudioConverter(
        binary=settings.ffmpeg_binary,
        timeout_seconds=settings.ffmpeg_timeout_seconds,
    )
    upload = UploadVoiceStep(gateway)
    mp3_steps: list[PipelineStep] = [
        DownloadStep(gateway, store, AudioFormat.MP3),
        ConvertStep(converter, store),
        upload,
    ]
    ogg_steps: list[PipelineStep] = [DownloadStep(gateway, store, AudioFormat.OGG), upload]
    if not settings.keep_artifacts:
        cleanup = CleanupArtifactsStep(store)
        mp3_steps.append(cleanup)
        ogg_steps.append(cleanup)
    return Processor(
        classifier=MessageClassifier(settings.work_chat, gateway),
        mp3_steps=mp3_steps,
        ogg_steps=ogg_steps,
        reply_steps=[ResendWithCaptionStep(gateway)],
    )
