"""FTP transfer client"""

import ftplib
import logging
import socket
from typing import Optional, Tuple
from urllib.parse import unquote, urlsplit

from .config import Config
from .exceptions import FatalInitError, LocalFileError, TransferError

logger = logging.getLogger(__name__)

DEFAULT_PORTS = {"ftp": 21, "ftps": 21}


class _LazyFileWriter:
    """Write callback that creates the local file on the first chunk.

    A transfer that fails before any data arrives leaves no file behind.
    """

    def __init__(self, path: str):
        self.path = path
        self.stream = None

    def _open(self):
        try:
            self.stream = open(self.path, "wb")
        except OSError as e:
            raise LocalFileError(f"{self.path}: {e.strerror or e}", self.path)

    def write(self, chunk: bytes):
        if self.stream is None:
            self._open()
        self.stream.write(chunk)

    def finish(self):
        # Empty remote files still produce an (empty) local file
        if self.stream is None:
            self._open()
        self.close()

    def close(self):
        if self.stream is not None:
            self.stream.close()
            self.stream = None


class FTPClient:
    """Client for an FTP server addressed by ftp:// (or ftps://) URLs.

    One control connection is opened on first use and reused by every later
    call until the endpoint changes or the connection fails.
    """

    def __init__(self, config: Optional[Config] = None):
        """
        Initialize FTP client.

        Args:
            config: Timeouts, passive mode and block size (default: Config())

        Raises:
            FatalInitError: If the configuration cannot drive a transfer client
        """
        self.config = config or Config()
        if self.config.timeout is not None and self.config.timeout <= 0:
            raise FatalInitError(f"Invalid FTP timeout: {self.config.timeout}")
        if self.config.blocksize <= 0:
            raise FatalInitError(f"Invalid transfer block size: {self.config.blocksize}")
        self.base_address = ""
        self.credentials = ""
        self._ftp = None
        self._endpoint = None

    def set_endpoint(self, base_address: str, credentials: str = ""):
        """Remember the server location and 'user:password' credentials.

        No network traffic happens here; the connection opens on the next
        remote operation.
        """
        self.close()
        self.base_address = base_address
        self.credentials = credentials
        logger.debug("Endpoint set to %s", base_address)

    def _login(self, parts) -> Tuple[str, str]:
        if self.credentials:
            user, _, password = self.credentials.partition(":")
            return user, password
        if parts.username:
            return unquote(parts.username), unquote(parts.password or "")
        return "", ""

    def _split_address(self, address: str):
        """Return ((scheme, host, port, user, password), path) for an address"""
        parts = urlsplit(address)
        scheme = parts.scheme.lower()
        if scheme not in DEFAULT_PORTS:
            raise TransferError(f"Unsupported protocol: '{parts.scheme or address}'", address)
        if not parts.hostname:
            raise TransferError(f"No host in address: {address}", address)
        try:
            port = parts.port or DEFAULT_PORTS[scheme]
        except ValueError:
            raise TransferError(f"Invalid port in address: {address}", address)
        user, password = self._login(parts)
        # Paths are relative to the login directory, as curl treats them
        path = unquote(parts.path.lstrip("/"))
        return (scheme, parts.hostname, port, user, password), path

    def _connect(self, endpoint) -> ftplib.FTP:
        scheme, host, port, user, password = endpoint
        ftp_class = ftplib.FTP_TLS if scheme == "ftps" else ftplib.FTP
        ftp = ftp_class(timeout=self.config.timeout, encoding=self.config.encoding)
        logger.debug("Connecting to %s:%d as %s", host, port, user or "anonymous")
        try:
            ftp.connect(host, port)
            if user:
                ftp.login(user, password)
            else:
                ftp.login()
            if scheme == "ftps":
                ftp.prot_p()
            ftp.set_pasv(self.config.passive)
        except BaseException:
            ftp.close()
            raise
        return ftp

    def _connection(self, endpoint) -> ftplib.FTP:
        if self._ftp is not None and self._endpoint == endpoint:
            return self._ftp
        self.close()
        self._ftp = self._connect(endpoint)
        self._endpoint = endpoint
        return self._ftp

    def _drop_connection(self):
        if self._ftp is not None:
            self._ftp.close()
        self._ftp = None
        self._endpoint = None

    def _handle_error(self, e: Exception, address: str, endpoint=None) -> None:
        """Convert ftplib and socket exceptions to TransferError"""
        host, port = (endpoint[1], endpoint[2]) if endpoint else ("server", 0)
        if isinstance(e, (ftplib.error_perm, ftplib.error_temp)):
            # Server answered; the control connection is still usable
            raise TransferError(str(e).strip(), address)
        self._drop_connection()
        if isinstance(e, socket.gaierror):
            raise TransferError(f"Could not resolve host: {host}", address)
        elif isinstance(e, ConnectionRefusedError):
            raise TransferError(f"Connection refused - no FTP server at {host}:{port}", address)
        elif isinstance(e, socket.timeout):
            raise TransferError(f"Operation timed out after {self.config.timeout}s", address)
        elif isinstance(e, EOFError):
            raise TransferError("Server closed the connection", address)
        elif isinstance(e, (ftplib.error_reply, ftplib.error_proto)):
            raise TransferError(f"Unexpected server reply: {str(e).strip()}", address)
        raise TransferError(str(e), address)

    def _run(self, address: str, operation):
        endpoint = None
        try:
            endpoint, path = self._split_address(address)
            ftp = self._connection(endpoint)
            return operation(ftp, path)
        except TransferError:
            raise
        except LocalFileError:
            # Failed mid-transfer; the pending reply is never read
            self._drop_connection()
            raise
        except UnicodeError as e:
            self._drop_connection()
            raise TransferError(
                f"Server reply is not valid {self.config.encoding}: {e}", address
            )
        except ftplib.all_errors as e:
            self._handle_error(e, address, endpoint)

    def list(self, address: str) -> str:
        """Return the raw LIST response for a directory address"""
        def do_list(ftp, path):
            lines = []
            ftp.retrlines(f"LIST {path}" if path else "LIST", lines.append)
            return "\n".join(lines)

        logger.debug("Listing %s", address)
        return self._run(address, do_list)

    def download(self, address: str, local_path: str):
        """Download a remote file, overwriting local_path"""
        writer = _LazyFileWriter(local_path)

        def do_download(ftp, path):
            ftp.retrbinary(f"RETR {path}", writer.write, blocksize=self.config.blocksize)

        logger.debug("Downloading %s -> %s", address, local_path)
        try:
            self._run(address, do_download)
            writer.finish()
        finally:
            writer.close()

    def upload(self, local_path: str, address: str):
        """Upload an existing local file to address"""
        try:
            stream = open(local_path, "rb")
        except OSError as e:
            raise LocalFileError(f"{local_path}: {e.strerror or e}", local_path)

        def do_upload(ftp, path):
            ftp.storbinary(f"STOR {path}", stream, blocksize=self.config.blocksize)

        logger.debug("Uploading %s -> %s", local_path, address)
        with stream:
            self._run(address, do_upload)

    def make_directory(self, address: str):
        self._run(address, lambda ftp, path: ftp.mkd(path.rstrip("/")))

    def remove(self, address: str, is_directory: bool):
        """Delete a remote file (DELE) or empty directory (RMD)"""
        def do_remove(ftp, path):
            if is_directory:
                ftp.rmd(path.rstrip("/"))
            else:
                ftp.delete(path)

        self._run(address, do_remove)

    def close(self):
        """Close the control connection, if any"""
        if self._ftp is None:
            return
        logger.debug("Closing FTP connection")
        try:
            self._ftp.quit()
        except ftplib.all_errors:
            self._ftp.close()
        self._ftp = None
        self._endpoint = None
