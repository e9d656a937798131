"""Configuration management for ftp-shell"""


class Config:
    """Configuration for the FTP shell"""

    def __init__(self):
        # Seconds before a blocking FTP socket operation gives up
        self.timeout = 30.0
        self.passive = True
        self.blocksize = 8192
        self.encoding = "utf-8"
        self.verbose = False

    @classmethod
    def from_args(cls, timeout: float = None, passive: bool = None,
                  blocksize: int = None, verbose: bool = None):
        """Create configuration with explicit overrides"""
        config = cls()
        if timeout is not None:
            config.timeout = timeout
        if passive is not None:
            config.passive = passive
        if blocksize is not None:
            config.blocksize = blocksize
        if verbose is not None:
            config.verbose = verbose
        return config

    def __repr__(self):
        return (
            f"Config(timeout={self.timeout}, passive={self.passive}, "
            f"blocksize={self.blocksize}, verbose={self.verbose})"
        )
