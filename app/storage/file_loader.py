from collections.abc import Iterable
from dataclasses import dataclass
from urllib.parse import unquote, urlparse

import httpx
from google.api_core import exceptions as gexc
from google.cloud import storage

from app.errors.codes import ErrorCode
from app.logging.logger import Log
from app.storage.exceptions import FileDownloadError, UnsupportedFileRefError


@dataclass(frozen=True)
class FileRef:
    """A resolved file reference: a storage object or an HTTP(S) URL."""

    bucket: str | None = None
    path: str | None = None
    url: str | None = None

    @property
    def is_url(self) -> bool:
        return self.url is not None


def parse_file_ref(ref: str, default_bucket: str) -> FileRef:
    """Resolve ``gs://bucket/path``, a bare object path, or an http(s) URL.

    Raises:
        UnsupportedFileRefError: for any other scheme or an empty reference.
    """
    ref = (ref or "").strip()
    if not ref:
        raise UnsupportedFileRefError("File reference is empty")
    parsed = urlparse(ref)
    if parsed.scheme in ("http", "https"):
        return FileRef(url=ref)
    if parsed.scheme == "gs":
        path = parsed.path.lstrip("/")
        if not parsed.netloc or not path:
            raise UnsupportedFileRefError(f"Invalid storage URI: {ref}")
        return FileRef(bucket=parsed.netloc, path=unquote(path))
    if parsed.scheme:
        raise UnsupportedFileRefError(f"Unsupported file reference scheme '{parsed.scheme}'")
    return FileRef(bucket=default_bucket, path=ref.lstrip("/"))


class FileLoader:
    """Fetches document bytes from Cloud Storage or an allow-listed URL."""

    def __init__(
        self,
        storage_client: storage.Client | None,
        http_client: httpx.Client,
        default_bucket: str,
        allowed_hosts: Iterable[str] = (),
        timeout_seconds: float = 30.0,
    ) -> None:
        self._storage = storage_client
        self._http = http_client
        self._default_bucket = default_bucket
        self._allowed_hosts = frozenset(host.lower() for host in allowed_hosts)
        self._timeout = timeout_seconds

    @property
    def default_bucket(self) -> str:
        return self._default_bucket

    def load(self, bucket: str, path: str) -> bytes:
        """Download a storage object.

        Raises:
            FileDownloadError: if the object is missing or the download fails.
        """
        if self._storage is None:
            raise FileDownloadError("Storage client is not initialized")
        try:
            blob = self._storage.bucket(bucket).blob(path)
            content = blob.download_as_bytes(timeout=self._timeout)
        except gexc.NotFound as exc:
            raise FileDownloadError(
                "File not found in storage", ErrorCode.FILE_DOWNLOAD_FAILED
            ) from exc
        except gexc.GoogleAPIError as exc:
            raise FileDownloadError(f"Failed to download file: {exc}") from exc
        Log.info(f"Downloaded {len(content)} bytes from gs://{bucket}/{path}")
        return content

    def load_ref(self, ref: str | FileRef) -> bytes:
        """Resolve a file reference and return its bytes."""
        file_ref = ref if isinstance(ref, FileRef) else parse_file_ref(ref, self._default_bucket)
        if file_ref.url is not None:
            return self._download_url(file_ref.url)
        return self.load(file_ref.bucket or self._default_bucket, file_ref.path or "")

    def _download_url(self, url: str) -> bytes:
        host = (urlparse(url).hostname or "").lower()
        if self._allowed_hosts and host not in self._allowed_hosts:
            raise UnsupportedFileRefError(f"Downloads from '{host}' are not allowed")
        try:
            response = self._http.get(url, timeout=self._timeout)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise FileDownloadError(
                f"Failed to download file: HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise FileDownloadError(f"Failed to download file: {exc}") from exc
        Log.info(f"Downloaded {len(response.content)} bytes from {host}")
        return response.content
