"""Errors raised while translating a novel page."""


class TranslationError(Exception):
    """Base class for every error raised by the translation pipeline."""


class ExtractionFailure(TranslationError):
    """The embedded novel payload could not be obtained from the page."""


class NoEmbeddedData(ExtractionFailure):
    """
    The page carries no novel payload, or the payload has no text.
    Callers treat this as "nothing to translate".
    """


class MalformedPayload(ExtractionFailure):
    """The payload marker was found but its object could not be parsed."""


class NormalizationError(TranslationError):
    """The generated fragment could not be parsed for structural correction."""
