"""Compression engine used by the dispatcher.

The dispatcher only depends on the `Engine` protocol. `XZEngine` is the
default implementation: it compresses fixed-size blocks into independent xz
streams on a thread pool and writes them in input order, which yields a valid
multi-stream ``.xz`` file. Tar awareness is used for listing and for
extracting single members; no tar index is written.
"""

from collections import deque
from collections.abc import Iterator, Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from functools import partial
from io import BufferedReader, RawIOBase
from lzma import FORMAT_XZ, PRESET_EXTREME, LZMADecompressor, LZMAError, compress
from os import cpu_count
from tarfile import TarError, TarInfo
from tarfile import open as tar_open
from typing import BinaryIO, ClassVar, Protocol, final

from .errors import FatalError
from .meta import CHUNK_SIZE, LOGGER
from .models import Tuning

__all__ = (
    "DICT_SIZES",
    "Engine",
    "XZEngine",
    "block_size",
)

# dictionary sizes of the xz presets 0 to 9
DICT_SIZES = (
    256 << 10,
    1 << 20,
    2 << 20,
    4 << 20,
    4 << 20,
    8 << 20,
    8 << 20,
    16 << 20,
    32 << 20,
    64 << 20,
)
_TRUNCATED = "Compressed data ended before the end-of-stream marker was reached"


class Engine(Protocol):
    """Collaborator performing the actual compression work."""

    def compress(
        self,
        source: BinaryIO,
        sink: BinaryIO,
        *,
        tar: bool,
        preset: int,
        tuning: Tuning,
    ) -> None: ...

    def decompress(
        self, source: BinaryIO, sink: BinaryIO, *, tar: bool, members: Sequence[str]
    ) -> None: ...

    def list(self, source: BinaryIO, sink: BinaryIO, *, tar: bool) -> None: ...


def block_size(preset: int, block_fraction: float) -> int:
    """Return the input block size for `preset` scaled by `block_fraction`."""
    return max(1, int(DICT_SIZES[preset & ~PRESET_EXTREME] * block_fraction))


@final
class _ChunkReader(RawIOBase):
    """Readable raw stream over an iterator of byte chunks."""

    def __init__(self, chunks: Iterator[bytes]):
        super().__init__()
        self._chunks = chunks
        self._pending = b""

    def readable(self):
        return True

    def readinto(self, buffer) -> int:
        while not self._pending:
            self._pending = next(self._chunks, b"")
            if not self._pending:
                return 0
        size = min(len(buffer), len(self._pending))
        buffer[:size] = self._pending[:size]
        self._pending = self._pending[size:]
        return size


@final
class _XZReader:
    """Decompresses concatenated xz streams, recording per-stream sizes."""

    __slots__: ClassVar = ("_source", "streams")

    def __init__(self, source: BinaryIO):
        self._source = source
        self.streams: list[tuple[int, int]] = []

    def chunks(self) -> Iterator[bytes]:
        decompressor = LZMADecompressor(format=FORMAT_XZ)
        compressed = uncompressed = 0
        for data in iter(partial(self._source.read, CHUNK_SIZE), b""):
            while data:
                available = len(data)
                out = decompressor.decompress(data)
                uncompressed += len(out)
                if out:
                    yield out
                if not decompressor.eof:
                    compressed += available
                    break
                data = decompressor.unused_data
                compressed += available - len(data)
                self.streams.append((compressed, uncompressed))
                decompressor = LZMADecompressor(format=FORMAT_XZ)
                compressed = uncompressed = 0
        if compressed or not self.streams:
            raise LZMAError(_TRUNCATED)

    def stream(self):
        return BufferedReader(_ChunkReader(self.chunks()), CHUNK_SIZE)


def _selected(name: str, members: Sequence[str]):
    name = name.removeprefix("./")
    for member in members:
        member = member.removeprefix("./").rstrip("/")
        if name == member or name.startswith(f"{member}/"):
            return member
    return None


@final
class XZEngine:
    """Default `Engine` built on the standard ``lzma`` and ``tarfile`` modules."""

    __slots__: ClassVar = ()

    def compress(
        self,
        source: BinaryIO,
        sink: BinaryIO,
        *,
        tar: bool,
        preset: int,
        tuning: Tuning,
    ) -> None:
        """Compress `source` into `sink` as one xz stream per input block.

        At most `tuning.qsize` blocks (default: twice the worker count) are
        in flight at any time.
        """

        workers = tuning.processes or cpu_count() or 1
        qsize = tuning.qsize or 2 * workers
        size = block_size(preset, tuning.block_fraction)
        LOGGER.debug(
            f"Compressing with {workers} workers, queue size {qsize}, "
            f"block size {size}, tar {tar}"
        )
        written = False
        try:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                pending: deque[Future[bytes]] = deque()
                for block in iter(partial(source.read, size), b""):
                    pending.append(
                        pool.submit(compress, block, format=FORMAT_XZ, preset=preset)
                    )
                    while len(pending) >= qsize:
                        sink.write(pending.popleft().result())
                        written = True
                while pending:
                    sink.write(pending.popleft().result())
                    written = True
            if not written:
                sink.write(compress(b"", format=FORMAT_XZ, preset=preset))
        except (LZMAError, OSError) as exc:
            raise FatalError(f"can not compress: {exc}") from exc

    def decompress(
        self, source: BinaryIO, sink: BinaryIO, *, tar: bool, members: Sequence[str]
    ) -> None:
        """Decompress `source` into `sink`.

        With `members` and tar awareness only the named members, or the
        members below a named directory, are written as a tar stream.
        """

        reader = _XZReader(source)
        try:
            if not members:
                for chunk in reader.chunks():
                    sink.write(chunk)
                return
            if not tar:
                LOGGER.warning("Ignoring member paths without tar awareness")
                for chunk in reader.chunks():
                    sink.write(chunk)
                return
            found: set[str] = set()
            with (
                tar_open(fileobj=reader.stream(), mode="r|") as archive,
                tar_open(fileobj=sink, mode="w|") as out,
            ):
                member: TarInfo
                for member in archive:
                    match = _selected(member.name, members)
                    if match is None:
                        continue
                    found.add(match)
                    out.addfile(
                        member, archive.extractfile(member) if member.isfile() else None
                    )
        except (LZMAError, TarError, OSError) as exc:
            raise FatalError(f"can not decompress: {exc}") from exc
        missing = tuple(
            member
            for member in members
            if member.removeprefix("./").rstrip("/") not in found
        )
        if missing:
            raise FatalError(f"not found in archive: {', '.join(missing)}")

    def list(self, source: BinaryIO, sink: BinaryIO, *, tar: bool) -> None:
        """List tar member names, or the xz streams without tar awareness."""

        reader = _XZReader(source)
        try:
            if tar:
                with tar_open(fileobj=reader.stream(), mode="r|") as archive:
                    for member in archive:
                        sink.write(f"{member.name}\n".encode())
                return
            for _ in reader.chunks():
                pass
            for index, (compressed, uncompressed) in enumerate(reader.streams):
                sink.write(f"{index} {compressed} {uncompressed}\n".encode())
        except (LZMAError, TarError, OSError) as exc:
            raise FatalError(f"can not list: {exc}") from exc
