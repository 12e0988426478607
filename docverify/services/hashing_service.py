from __future__ import annotations

import asyncio
import hashlib
import mimetypes
from os import PathLike
from pathlib import Path

from docverify.core.errors import HashComputationError
from docverify.core.logger import get_logger
from docverify.schemas.document import FileDescriptor, HashedDocument

logger = get_logger(component="HashingService")


class HashingService:
    ALGORITHM = "sha256"

    def compute_sha256(self, data: bytes | bytearray | memoryview) -> str:
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise HashComputationError(f"Cannot hash object of type {type(data).__name__}")
        try:
            sha256 = hashlib.new(self.ALGORITHM)
        except ValueError as exc:
            raise HashComputationError(f"Hash primitive {self.ALGORITHM} is unavailable") from exc
        sha256.update(data)
        return sha256.hexdigest()

    async def hash_bytes(
        self, content: bytes, *, name: str, media_type: str | None = None
    ) -> HashedDocument:
        digest = self.compute_sha256(content)
        descriptor = FileDescriptor(
            name=name,
            size_bytes=len(content),
            media_type=media_type or mimetypes.guess_type(name)[0],
        )
        logger.debug("Content hashed", filename=name, size_bytes=descriptor.size_bytes, digest=digest)
        return HashedDocument(digest=digest, descriptor=descriptor)

    async def hash_file(self, path: str | PathLike[str]) -> HashedDocument:
        """Read ``path`` in full off the event loop and hash its bytes.

        Raises:
            HashComputationError: the path is invalid, or the file is missing, unreadable or not a regular file.
        """
        file_path = Path(path)
        try:
            content = await asyncio.to_thread(file_path.read_bytes)
        except (OSError, ValueError) as exc:
            logger.warning("File read failed", path=str(file_path), error=str(exc))
            reason = getattr(exc, "strerror", None) or exc
            raise HashComputationError(f"Cannot read {file_path.name}: {reason}") from exc
        return await self.hash_bytes(content, name=file_path.name)
