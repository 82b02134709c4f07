from voicebot.processor.models import AttributeKind, Document


def is_audio_file(document: Document) -> bool:
    """True if any attribute marks the document as audio, voice or not."""
    return any(attr.kind is AttributeKind.AUDIO for attr in document.attributes)


def is_voice_message(document: Document) -> bool:
    """True if an audio attribute carries the voice flag."""
    return any(
        attr.kind is AttributeKind.AUDIO and attr.voice for attr in document.attributes
    )


def get_file_name(document: Document) -> str:
    """Return the first file name attribute, falling back to the document id."""
    for attr in document.attributes:
        if attr.kind is AttributeKind.FILENAME:
            return attr.file_name
    return str(document.id)
