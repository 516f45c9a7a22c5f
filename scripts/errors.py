"""Error types raised by the pledge certificate tools.

Every error carries a user-facing message; the CLIs print it as
``{"error": ...}`` on stderr and exit non-zero.
"""


class PledgeError(Exception):
    """Base class for all recoverable pledge errors."""


class ValidationError(PledgeError):
    """A required field is missing before advancing a step."""

    def __init__(self, missing):
        self.missing = list(missing)
        if self.missing == ["name"]:
            message = "Please enter your name"
        elif self.missing == ["signature"]:
            message = "Please draw your signature"
        else:
            message = "Please complete all fields: " + _join(self.missing)
        super().__init__(message)


class CameraPermissionError(PledgeError):
    def __init__(self, message="Unable to access camera. Please check permissions."):
        super().__init__(message)


class DeviceError(PledgeError):
    def __init__(self, message="No camera available. Please connect a camera and try again."):
        super().__init__(message)


class DecodeError(PledgeError):
    """An image (template, photo or signature) could not be decoded."""

    def __init__(self, source, reason=""):
        self.source = source
        self.reason = reason
        message = f"Error loading {source} image. Please try again."
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class NotReadyError(PledgeError):
    def __init__(self, message="Camera not ready. Please wait a moment and try again."):
        super().__init__(message)


class TransitionError(PledgeError):
    """The wizard was asked to move somewhere it cannot go from its screen."""


def _join(names):
    if len(names) <= 2:
        return " and ".join(names)
    return ", ".join(names[:-1]) + ", and " + names[-1]
