"""Custom exceptions for Neusicgen."""


class NeusicgenError(Exception):
    """Base exception for all Neusicgen errors."""

    pass


class SynthesisError(NeusicgenError):
    """Error during audio synthesis/rendering."""

    pass


class OutputDeviceError(SynthesisError):
    """Error opening or writing to the audio output device."""

    pass


class RenderError(SynthesisError):
    """Error during audio rendering.

    Attributes:
        failures: (note index, exception) pairs for voices that failed
    """

    def __init__(self, message: str, failures: list[tuple[int, BaseException]] | None = None):
        super().__init__(message)
        self.failures = failures or []


class ExportError(NeusicgenError):
    """Error writing an exported file."""

    pass
