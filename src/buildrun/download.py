"""Fetch remote resources into a local cache directory."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import UTC, datetime
from email.utils import format_datetime, parsedate_to_datetime
from pathlib import Path
from urllib.parse import unquote, urlparse
from urllib.request import url2pathname

import httpx

from buildrun.config import Settings
from buildrun.console import Console
from buildrun.errors import OfflineUnavailableError, TransferError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024
PARTIAL_SUFFIX = ".part"
IDENTITY_HEADERS = {"Accept-Encoding": "identity"}


@dataclass(slots=True)
class RemoteProperties:
    """Metadata of a remote resource, as far as the server reports it."""

    size: int | None
    last_modified: datetime | None

    @classmethod
    def from_headers(cls, headers: httpx.Headers) -> RemoteProperties:
        size_raw = headers.get("content-length")
        last_modified_raw = headers.get("last-modified")
        size = int(size_raw) if size_raw and size_raw.isdigit() else None
        last_modified = None
        if last_modified_raw:
            try:
                last_modified = parsedate_to_datetime(last_modified_raw)
            except (TypeError, ValueError):
                logger.debug("Unparseable Last-Modified header: %r", last_modified_raw)
        if last_modified is not None and last_modified.tzinfo is None:
            last_modified = last_modified.replace(tzinfo=UTC)
        return cls(size=size, last_modified=last_modified)

    def matches(self, path: Path) -> bool:
        """Compare against a local file; unknown remote metadata never matches."""

        if self.size is None and self.last_modified is None:
            return False
        stat = path.stat()
        if self.size is not None and self.size != stat.st_size:
            return False
        if self.last_modified is not None:
            return int(self.last_modified.timestamp()) == int(stat.st_mtime)
        return True


class Downloader:
    """Materialize remote URIs as local files, honouring offline mode.

    An existing local copy is reused when its size and modification time
    match the remote `Content-Length` and `Last-Modified`; otherwise it is
    replaced by one full transfer. In offline mode the network is never
    touched and a cached file is trusted as is.
    """

    def __init__(
        self,
        console: Console | None = None,
        *,
        offline: bool = False,
        client: httpx.Client | None = None,
        timeout_seconds: float = 30.0,
        user_agent: str | None = None,
    ) -> None:
        self.console = console or Console()
        self.offline = offline
        self._owns_client = client is None
        self._client = client or httpx.Client(
            timeout=httpx.Timeout(timeout_seconds, connect=10.0),
            headers={"User-Agent": user_agent} if user_agent else None,
            follow_redirects=True,
            mounts={"file://": FileTransport()},
        )

    @classmethod
    def from_settings(cls, settings: Settings, console: Console | None = None) -> Downloader:
        return cls(
            console or Console.from_settings(settings),
            offline=settings.offline,
            timeout_seconds=settings.request_timeout_seconds,
            user_agent=settings.user_agent,
        )

    def fetch(self, uri: str, cache_dir: str | os.PathLike[str]) -> Path:
        """Return the path of a valid local copy of `uri` inside `cache_dir`."""

        directory = Path(cache_dir)
        self.console.log("download `%s` to `%s`...", uri, directory)
        target = directory / local_file_name(uri)

        if not target.exists():
            if self.offline:
                error = OfflineUnavailableError(uri=uri, path=target)
                self.console.log("%s", error.message)
                raise error
            return self._transfer(uri, target)

        if self.offline:
            return target

        self.console.log("local file already exists -- comparing properties to remote file...")
        if self._remote_properties(uri).matches(target):
            self.console.log("local and remote file properties seem to match, using %s.", target)
            return target
        self.console.log("local file `%s` differs from remote one -- replacing it", target)
        return self._transfer(uri, target)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> Downloader:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()

    def _remote_properties(self, uri: str) -> RemoteProperties:
        try:
            response = self._client.head(request_url(uri), headers=IDENTITY_HEADERS)
            response.raise_for_status()
        except httpx.HTTPError as error:
            raise self._transfer_error(uri, "probing", error) from error
        return RemoteProperties.from_headers(response.headers)

    def _transfer(self, uri: str, target: Path) -> Path:
        self.console.log("transferring `%s`...", uri)
        target.parent.mkdir(parents=True, exist_ok=True)
        partial = target.with_name(target.name + PARTIAL_SUFFIX)
        try:
            with self._client.stream(
                "GET",
                request_url(uri),
                headers=IDENTITY_HEADERS,
            ) as response:
                response.raise_for_status()
                properties = RemoteProperties.from_headers(response.headers)
                with partial.open("wb") as handle:
                    for chunk in response.iter_raw(CHUNK_SIZE):
                        handle.write(chunk)
        except (httpx.HTTPError, OSError) as error:
            partial.unlink(missing_ok=True)
            raise self._transfer_error(uri, "transferring", error) from error
        except BaseException:
            partial.unlink(missing_ok=True)
            raise

        partial.replace(target)
        if properties.last_modified is not None:
            timestamp = properties.last_modified.timestamp()
            os.utime(target, (timestamp, timestamp))
        size = target.stat().st_size
        self.console.log("`%s` downloaded (%d bytes).", target.name, size)
        return target

    def _transfer_error(
        self,
        uri: str,
        action: str,
        error: httpx.HTTPError | OSError,
    ) -> TransferError:
        message = f"{action} `{uri}` failed: {error}"
        self.console.log("%s", message)
        logger.warning("Error %s %s: %s", action, uri, error)
        return TransferError(message, uri=uri)


def request_url(uri: str) -> str:
    """Give host-less `file:` URIs an explicit `localhost` so httpx keeps them absolute."""

    parsed = urlparse(uri)
    if parsed.scheme == "file" and not parsed.netloc:
        return parsed._replace(netloc="localhost").geturl()
    return uri


def local_file_name(uri: str) -> str:
    """Derive the cache file name from the last path segment of `uri`."""

    name = unquote(urlparse(uri).path.rstrip("/").rsplit("/", 1)[-1])
    if not name:
        raise ValueError(f"Cannot derive a local file name from URI: {uri!r}")
    return name


class FileTransport(httpx.BaseTransport):
    """Serve `file://` URIs from the local filesystem with HTTP-like metadata.

    The host part of the URI is ignored; see `request_url`.
    """

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        path = Path(url2pathname(request.url.raw_path.decode("ascii").split("?", 1)[0]))
        if not path.is_file():
            return httpx.Response(404, request=request)
        stat = path.stat()
        headers = {
            "Content-Length": str(stat.st_size),
            "Last-Modified": format_datetime(
                datetime.fromtimestamp(int(stat.st_mtime), tz=UTC),
                usegmt=True,
            ),
        }
        if request.method == "HEAD":
            return httpx.Response(200, headers=headers, request=request)
        if request.method != "GET":
            return httpx.Response(405, request=request)
        return httpx.Response(200, headers=headers, stream=_FileStream(path), request=request)


class _FileStream(httpx.SyncByteStream):
    def __init__(self, path: Path) -> None:
        self._path = path

    def __iter__(self) -> Iterator[bytes]:
        with self._path.open("rb") as handle:
            while chunk := handle.read(CHUNK_SIZE):
                yield chunk
