"""
Chunked upsert execution.

Records are applied in consecutive, order-preserving chunks. Each chunk is one
atomic write (the `apply_chunk` callable owns the transaction) that reports, per
row, whether the row was newly inserted. Chunks run sequentially and the run
stops at the first failing chunk: earlier chunks stay committed, the failing
chunk is not applied, later chunks are not attempted.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterator, Sequence

import asyncpg

DEFAULT_CHUNK_SIZE = 500

logger = logging.getLogger(__name__)

# Returns one `was_inserted` flag per applied row.
ApplyChunk = Callable[[list[dict[str, Any]]], Awaitable[list[bool]]]

STORAGE_ERRORS: tuple[type[BaseException], ...] = (
    asyncpg.PostgresError,
    asyncpg.InterfaceError,
    OSError,
    asyncio.TimeoutError,
)


class CatalogError(RuntimeError):
    pass


@dataclass(frozen=True)
class ChunkFailure:
    chunk_index: int
    offset: int
    size: int
    message: str


@dataclass
class UpsertOutcome:
    created: int = 0
    updated: int = 0
    chunks_applied: int = 0
    failure: ChunkFailure | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @property
    def applied(self) -> int:
        return self.created + self.updated


def chunked(items: Sequence[Any], size: int) -> Iterator[tuple[int, list[Any]]]:
    """
    Yield (offset, chunk) pairs of at most `size` items, in input order.
    """
    if size <= 0:
        raise ValueError("chunk size must be > 0")
    for offset in range(0, len(items), size):
        yield offset, list(items[offset : offset + size])


async def run_chunked_upsert(
    records: Sequence[dict[str, Any]],
    apply_chunk: ApplyChunk,
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    label: str = "upsert",
) -> UpsertOutcome:
    outcome = UpsertOutcome()

    for index, (offset, chunk) in enumerate(chunked(records, chunk_size), start=1):
        try:
            flags = await apply_chunk(chunk)
        except STORAGE_ERRORS as exc:
            logger.warning(
                "%s_chunk_failed chunk=%s offset=%s size=%s error=%s",
                label,
                index,
                offset,
                len(chunk),
                exc,
            )
            outcome.failure = ChunkFailure(
                chunk_index=index,
                offset=offset,
                size=len(chunk),
                message=str(exc) or exc.__class__.__name__,
            )
            break

        if len(flags) != len(chunk):
            # Every row either inserts or updates; a short result means the write
            # silently skipped rows.
            raise CatalogError(
                f"{label} chunk {index} reported {len(flags)} rows for {len(chunk)} records."
            )

        inserted = sum(1 for f in flags if f)
        outcome.created += inserted
        outcome.updated += len(flags) - inserted
        outcome.chunks_applied += 1

    return outcome
