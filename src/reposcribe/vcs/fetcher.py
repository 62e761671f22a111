"""Batched file content fetching with size and rate limits.

Files are fetched in fixed-size batches. All fetches of a batch run
concurrently and the batch size is the only concurrency limit. Batches run
strictly one after another, with a short delay between them to respect
upstream rate limits.

A failing file is logged and left out of the result; it never aborts its
batch. Oversized, absent and binary files are omitted silently.
"""

import asyncio
import logging

from reposcribe.models.repository import RepositoryRef
from reposcribe.vcs.base import VCSContentSource

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 15
DEFAULT_BATCH_DELAY = 0.05
DEFAULT_MAX_FILE_SIZE = 200_000
DEFAULT_MAX_FILES = 100


class BatchedContentFetcher:
    """Fetches file contents for a filtered path list.

    Attributes:
        batch_size: Concurrent fetches per batch
        batch_delay: Seconds slept after every batch except the last
        max_file_size: Per-file size ceiling in bytes
        max_files: Maximum number of paths fetched per call
    """

    def __init__(
        self,
        source: VCSContentSource,
        batch_size: int = DEFAULT_BATCH_SIZE,
        batch_delay: float = DEFAULT_BATCH_DELAY,
        max_file_size: int = DEFAULT_MAX_FILE_SIZE,
        max_files: int = DEFAULT_MAX_FILES,
    ) -> None:
        if batch_size <= 0:
            raise ValueError(f"batch_size must be positive (got {batch_size})")
        self._source = source
        self.batch_size = batch_size
        self.batch_delay = batch_delay
        self.max_file_size = max_file_size
        self.max_files = max_files

    def _batches(self, paths: list[str]) -> list[list[str]]:
        capped = list(dict.fromkeys(paths))[: self.max_files]
        return [capped[i : i + self.batch_size] for i in range(0, len(capped), self.batch_size)]

    async def _fetch_one(self, path: str, ref: RepositoryRef) -> tuple[str, str | None]:
        try:
            data = await self._source.get_file_content(path, ref)
        except Exception as e:
            logger.warning("Failed to fetch %s at %s: %s", path, ref, e)
            return path, None

        if data is None:
            logger.debug("File absent at %s: %s", ref, path)
            return path, None

        if len(data) > self.max_file_size:
            logger.debug("Skipping oversized file %s (%d bytes)", path, len(data))
            return path, None

        try:
            return path, data.decode("utf-8")
        except UnicodeDecodeError:
            logger.debug("Skipping binary file %s", path)
            return path, None

    async def fetch(self, paths: list[str], ref: RepositoryRef) -> dict[str, str]:
        """Fetch file contents in sequential batches.

        Args:
            paths: Repository-relative paths (already filtered)
            ref: Branch ref to read from

        Returns:
            Mapping of path to text content for fetched, under-size files
        """
        batches = self._batches(paths)
        contents: dict[str, str] = {}

        for index, batch in enumerate(batches):
            results = await asyncio.gather(*(self._fetch_one(path, ref) for path in batch))
            for path, content in results:
                if content is not None:
                    contents[path] = content

            logger.debug(
                "Batch %d/%d: %d/%d files fetched",
                index + 1,
                len(batches),
                sum(1 for path, content in results if content is not None),
                len(batch),
            )

            if index < len(batches) - 1 and self.batch_delay > 0:
                await asyncio.sleep(self.batch_delay)

        logger.info(
            "Fetched %d of %d files from %s",
            len(contents),
            min(len(set(paths)), self.max_files),
            ref,
        )
        return contents
