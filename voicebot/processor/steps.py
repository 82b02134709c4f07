from voicebot.logging.logger import Log
from voicebot.processor.artifacts import ArtifactStore
from voicebot.processor.converter import AudioConverter
from voicebot.processor.models import AudioFormat, ChatRef, ConvertAndSend, ReplyVoiceResend
from voicebot.processor.pipeline import PipelineContext, PipelineStep
from voicebot.telegram.gateway import TransferGateway


def _convert_outcome(context: PipelineContext) -> ConvertAndSend:
    if not isinstance(context.outcome, ConvertAndSend):
        raise ValueError("PipelineContext.outcome must be ConvertAndSend")
    return context.outcome


def _chat(context: PipelineContext) -> ChatRef:
    if context.message.chat is None:
        raise ValueError("PipelineContext.message.chat must be set before sending")
    return context.message.chat


class DownloadStep(PipelineStep):
    def __init__(
        self, gateway: TransferGateway, store: ArtifactStore, audio_format: AudioFormat
    ) -> None:
        self._gateway = gateway
        self._store = store
        self._audio_format = audio_format
        self.stage = f"download {audio_format.value}"

    async def run(self, context: PipelineContext) -> PipelineContext:
        outcome = _convert_outcome(context)
        path = self._store.download_path(outcome.document.id, self._audio_format)
        await self._gateway.download_file(outcome.document, path)
        context.download_path = path
        context.artifacts.append(path)
        if self._audio_format is AudioFormat.OGG:
            context.ogg_path = path
        return context


class ConvertStep(PipelineStep):
    stage = "convert mp3 to ogg"

    def __init__(self, converter: AudioConverter, store: ArtifactStore) -> None:
        self._converter = converter
        self._store = store

    async def run(self, context: PipelineContext) -> PipelineContext:
        if context.download_path is None:
            raise ValueError("PipelineContext.download_path must be set before conversion")
        outcome = _convert_outcome(context)
        ogg_path = self._store.ogg_path(outcome.document.id)
        await self._converter.convert(context.download_path, ogg_path)
        context.ogg_path = ogg_path
        context.artifacts.append(ogg_path)
        return context


class UploadVoiceStep(PipelineStep):
    stage = "send voice"

    def __init__(self, gateway: TransferGateway) -> None:
        self._gateway = gateway

    async def run(self, context: PipelineContext) -> PipelineContext:
        if context.ogg_path is None:
            raise ValueError("PipelineContext.ogg_path must be set before upload")
        await self._gateway.upload_voice(
            _chat(context), context.ogg_path, context.message.access_hashes
        )
        return context


class ResendWithCaptionStep(PipelineStep):
    stage = "send voice with caption"

    def __init__(self, gateway: TransferGateway) -> None:
        self._gateway = gateway

    async def run(self, context: PipelineContext) -> PipelineContext:
        outcome = context.outcome
        if not isinstance(outcome, ReplyVoiceResend):
            raise ValueError("PipelineContext.outcome must be ReplyVoiceResend")
        await self._gateway.resend_with_caption(
            _chat(context),
            outcome.document,
            outcome.caption,
            outcome.formatting,
            context.message.access_hashes,
        )
        return context


class CleanupArtifactsStep(PipelineStep):
    stage = "cleanup artifacts"

    def __init__(self, store: ArtifactStore) -> None:
        self._store = store

    async def run(self, context: PipelineContext) -> PipelineContext:
        self._store.discard(context.artifacts)
        Log.debug(
            f"Discarded {len(context.artifacts)} artifacts for message {context.message.id}"
        )
        return context
