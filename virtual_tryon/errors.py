"""Error taxonomy for the try-on core.

Generation failures are classified once, at the gateway boundary. Everything
downstream dispatches on the exception type only.
"""


class TryOnError(Exception):
    """Base class for every failure the try-on core surfaces."""


class GenerationError(TryOnError):
    """The image-generation capability failed for an unclassified reason."""


class Blocked(GenerationError):
    """The request was refused by a safety or policy filter."""

    def __init__(self, reason: str, detail: str | None = None):
        self.reason = reason
        self.detail = detail
        message = f"Request was blocked. Reason: {reason}."
        if detail:
            message = f"{message} {detail}"
        super().__init__(message)


class NoImageReturned(GenerationError):
    """The model answered without any image data."""

    def __init__(self, text_feedback: str | None = None, message: str | None = None):
        self.text_feedback = text_feedback
        if message is None:
            message = "The AI model did not return an image."
            if text_feedback:
                message = f'{message} The model responded with text: "{text_feedback}"'
        super().__init__(message)


class TransportError(GenerationError):
    """Network failure while talking to the model or fetching an image."""


class UnsupportedInput(GenerationError):
    """An input image uses an encoding the pipeline cannot handle."""

    def __init__(self, message: str, mime_type: str | None = None):
        self.mime_type = mime_type
        super().__init__(message)


class ValidationError(TryOnError):
    """An operation was invoked in a state that does not allow it."""


class StorageError(TryOnError):
    """A persistent store operation failed."""


__all__ = [
    "TryOnError",
    "GenerationError",
    "Blocked",
    "NoImageReturned",
    "TransportError",
    "UnsupportedInput",
    "ValidationError",
    "StorageError",
]
