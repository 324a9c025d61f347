"""User-facing messages for try-on failures."""

from ..errors import (
    Blocked,
    NoImageReturned,
    StorageError,
    TransportError,
    UnsupportedInput,
    ValidationError,
)


def friendly_error_message(error: BaseException, context: str) -> str:
    """Turn a classified error into the single message shown to the user."""
    if isinstance(error, TransportError):
        return (
            f"{context}. A network error occurred while contacting the AI model. "
            "Please check your internet connection and try again."
        )
    if isinstance(error, UnsupportedInput):
        if error.mime_type and error.mime_type != "unknown":
            return f"File type '{error.mime_type}' is not supported. Please use a format like PNG, JPEG, or WEBP."
        return "Unsupported file format. Please upload an image format like PNG, JPEG, or WEBP."
    if isinstance(error, Blocked):
        return (
            f"{context}. The request was blocked by the model's safety filters "
            f"(reason: {error.reason}). Please try a different image."
        )
    if isinstance(error, NoImageReturned):
        return (
            f"{context}. The AI model did not return an image. This can happen due to safety "
            "filters or if the request is too complex. Please try again."
        )
    if isinstance(error, StorageError):
        return f"{context}. Your data could not be saved locally."
    if isinstance(error, ValidationError):
        return f"{context}. {error}"
    return f"{context}. {error or 'An unknown error occurred.'}"
