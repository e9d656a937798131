"""Exceptions raised by ftp-shell components."""


class FtpShellError(Exception):
    """Base exception for ftp-shell."""
    pass


class UsageError(FtpShellError):
    """Raised when a command is invoked with the wrong arguments."""

    def __init__(self, message: str, command: str = ""):
        super().__init__(message)
        self.command = command


class NotConnectedError(UsageError):
    """Raised when a remote command runs before any 'connect'."""

    def __init__(self, command: str = ""):
        super().__init__(
            "Not connected. Use: connect <url> [user:password]", command
        )


class LocalFileError(FtpShellError):
    """Raised when a local filesystem operation fails (not found, permission, ...)."""

    def __init__(self, message: str, path: str = ""):
        super().__init__(message)
        self.path = path


class TransferError(FtpShellError):
    """Raised when the FTP server or the connection to it fails."""

    def __init__(self, message: str, address: str = ""):
        super().__init__(message)
        self.address = address


class FatalInitError(FtpShellError):
    """Raised when the transfer client cannot be set up at startup."""
    pass
