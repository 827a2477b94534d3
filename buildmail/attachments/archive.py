"""Single-entry zip archiving for attachment streams."""

import io
import shutil
import zipfile
from typing import BinaryIO, Optional


class ZipArchiver:
    """Wraps a stream into an in-memory zip archive with a single entry.

    Attributes:
        compression: zipfile compression method
        compresslevel: Compression level passed to zipfile (None for default)
    """

    def __init__(self, compression: int = zipfile.ZIP_DEFLATED, compresslevel: Optional[int] = None) -> None:
        self.compression = compression
        self.compresslevel = compresslevel

    def wrap(self, name: str, stream: BinaryIO) -> BinaryIO:
        """Archive the stream's content as ``name`` and return the zip bytes as a stream.

        The input stream is read to the end and closed.

        Args:
            name: Entry name inside the archive
            stream: Source stream

        Returns:
            Readable stream positioned at the start of the archive
        """
        buffer = io.BytesIO()
        with stream, zipfile.ZipFile(
            buffer, mode="w", compression=self.compression, compresslevel=self.compresslevel
        ) as archive:
            with archive.open(name, mode="w") as entry:
                shutil.copyfileobj(stream, entry)
        buffer.seek(0)
        return buffer
