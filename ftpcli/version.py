"""Version information for ftp-shell"""

__version__ = "1.0.0"


def get_version_string():
    """Get formatted version string"""
    return f"ftpsh {__version__}"
