"""Custom exceptions for linkdoctor."""


class LinkDoctorError(Exception):
    """Base exception for all linkdoctor errors."""


class ManifestError(LinkDoctorError):
    """Raised when the manifest or its dependency section is missing or malformed.

    This is a precondition failure: it is raised before any filesystem
    work against the dependency store begins.
    """


class InstallError(LinkDoctorError):
    """Raised when the package manager install command exits non-zero."""

    def __init__(self, command: str, returncode: int, output: str):
        self.command = command
        self.returncode = returncode
        self.output = output
        super().__init__(f"command {command!r} failed (exit {returncode}): {output}")
