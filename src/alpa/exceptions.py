"""Custom exceptions for alpa.

Every error raised while serving a single generation derives from
:class:`GenerationError` so the coordinator can abort that one attempt and
keep running.
"""


class AlpaError(Exception):
    """Base exception for all alpa errors."""
    pass


class ConfigurationError(AlpaError):
    """Raised when the configuration file or a command entry is invalid."""
    pass


# Generation Exceptions
class GenerationError(AlpaError):
    """Base exception for errors scoped to one generation attempt."""
    pass


class UnsupportedPlatform(GenerationError):
    """Raised when a keystroke flow has no implementation on this platform."""
    pass


class EngineError(GenerationError):
    """Raised when the text-generation engine fails."""
    pass


class PromptSurfaceError(GenerationError):
    """Raised when the single-line prompt process fails or returns garbage."""
    pass


class ClipboardError(GenerationError):
    """Raised when the system clipboard cannot be read."""
    pass
