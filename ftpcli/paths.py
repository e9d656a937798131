"""Local and remote path state for the shell"""

import os

# Length of the shortest scheme prefix a remote address carries ("ftp://").
# A separator found before this offset belongs to the scheme, so ascending
# never climbs above the server root.
SCHEME_PREFIX_LEN = len("ftp://")


def normalize_remote(url: str) -> str:
    """Return url with a trailing '/' appended if it lacks one"""
    if not url.endswith("/"):
        url += "/"
    return url


def _root_floor(address: str) -> int:
    """Smallest index a separator must reach to count as a path separator"""
    marker = address.find("://")
    if marker < 0:
        return SCHEME_PREFIX_LEN
    return max(SCHEME_PREFIX_LEN, marker + len("://"))


class RemoteBase:
    """Current remote location, always kept slash-terminated once set.

    Navigation is textual: descending never checks that the target exists,
    the server only finds out on the next listing or transfer.
    """

    def __init__(self, address: str = ""):
        self.address = normalize_remote(address) if address else ""

    def __repr__(self):
        return f"RemoteBase({self.address!r})"

    def __eq__(self, other):
        if isinstance(other, RemoteBase):
            return self.address == other.address
        return NotImplemented

    @property
    def is_set(self) -> bool:
        return bool(self.address)

    def descend(self, name: str) -> "RemoteBase":
        if not name:
            raise ValueError("directory name must not be empty")
        return RemoteBase(normalize_remote(normalize_remote(self.address) + name))

    def ascend(self) -> "RemoteBase":
        """Drop the final path segment, staying put at the server root"""
        if len(self.address) < 2:
            return RemoteBase(self.address)
        last_slash = self.address.rfind("/", 0, len(self.address) - 1)
        if last_slash < _root_floor(self.address):
            return RemoteBase(self.address)
        return RemoteBase(self.address[: last_slash + 1])

    def join(self, name: str) -> str:
        """Address of an entry named name inside this location"""
        return normalize_remote(self.address) + name

    def last_segment(self) -> str:
        trimmed = self.address.rstrip("/")
        if not trimmed:
            return ""
        floor = _root_floor(self.address)
        if len(trimmed) <= floor:
            return trimmed
        return trimmed[max(trimmed.rfind("/") + 1, floor):]


class PathState:
    """The shell's local working directory and remote base, tracked independently"""

    def __init__(self, local_directory: str = None, remote: RemoteBase = None):
        self.local_directory = os.path.abspath(local_directory or os.getcwd())
        self.remote = remote if remote is not None else RemoteBase()

    @property
    def remote_base(self) -> str:
        return self.remote.address

    def connect(self, url: str):
        self.remote = RemoteBase(url)

    def change_remote(self, name: str):
        """Apply a remote 'cd': '..' ascends, anything else descends"""
        if name == "..":
            self.remote = self.remote.ascend()
        else:
            self.remote = self.remote.descend(name)
        return self.remote

    def set_local(self, path: str, filesystem) -> str:
        """Change the local directory through filesystem.

        LocalFileError from the filesystem propagates and leaves
        local_directory untouched.
        """
        new_directory = filesystem.set_current_directory(self.local_path(path))
        self.local_directory = new_directory
        return new_directory

    def local_path(self, path: str) -> str:
        """Resolve a user-supplied local path against the local directory"""
        return os.path.join(self.local_directory, os.path.expanduser(path))

    def local_name(self) -> str:
        return os.path.basename(self.local_directory.rstrip(os.sep)) or self.local_directory
