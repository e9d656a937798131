"""Shell session: path state plus the local and remote collaborators"""

from typing import Optional

from .client import FTPClient
from .config import Config
from .local import LocalFileSystem
from .paths import PathState


class Session:
    """Everything one shell process works with.

    Created once at startup and owned by the command handler for the
    lifetime of the process.
    """

    def __init__(self, config: Optional[Config] = None, state: Optional[PathState] = None,
                 local: Optional[LocalFileSystem] = None, remote: Optional[FTPClient] = None):
        self.config = config or Config()
        self.state = state or PathState()
        self.local = local or LocalFileSystem()
        self.remote = remote or FTPClient(self.config)

    def connect(self, url: str, credentials: str = ""):
        self.state.connect(url)
        self.remote.set_endpoint(self.state.remote_base, credentials)
        return self.state.remote_base

    def prompt(self) -> str:
        return (
            f"local:{self.state.local_name()} | "
            f"remote:{self.state.remote.last_segment()}> "
        )

    def close(self):
        self.remote.close()
