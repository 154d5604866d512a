"""Exception types raised by the Volca Sample pattern model."""

from __future__ import annotations


class VolcaError(Exception):
    """Base class for every error raised by this package."""


class OutOfRange(VolcaError, ValueError):
    """A knob, motion or sample value lies outside its allowed range."""


class InvalidSelector(OutOfRange):
    """A pattern, part or step number lies outside its allowed range."""


class UnknownParameter(VolcaError, ValueError):
    """A parameter name is not one of the eleven part parameters."""


class UnknownFunction(VolcaError, ValueError):
    """A function name is not one of motion, loop, reverb, reverse or mute."""


class MalformedMotionInput(VolcaError, ValueError):
    """Motion values were not given as a list of the expected length."""


class IOFailure(VolcaError, OSError):
    """A pattern file could not be written."""


class UnsupportedPlatform(VolcaError, RuntimeError):
    """No syro encoder executable is known for (or present on) this host."""


class EncoderError(VolcaError, RuntimeError):
    """The external syro encoder ran but exited with a failure status."""

    def __init__(self, message: str, returncode: int | None = None) -> None:
        super().__init__(message)
        self.returncode = returncode


__all__ = [
    "EncoderError",
    "IOFailure",
    "InvalidSelector",
    "MalformedMotionInput",
    "OutOfRange",
    "UnknownFunction",
    "UnknownParameter",
    "UnsupportedPlatform",
    "VolcaError",
]
