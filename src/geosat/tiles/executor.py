from __future__ import annotations

import asyncio
import contextlib
from typing import TYPE_CHECKING

from geosat.shared.progress import raise_if_cancelled

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable

    from geosat.shared.progress import CancelToken


async def run_tiles(
    tiles: Iterable[tuple[int, int]],
    *,
    process_tile: Callable[[int, int], Awaitable[None]],
    concurrency: int,
    on_done: Callable[[], Awaitable[None]] | None = None,
    cancel: CancelToken | None = None,
) -> None:
    """
    Run process_tile for every (x, y) with at most `concurrency` in flight.

    The cancel token is checked right before a tile starts, so once it is
    set no new tile begins; tiles already running may finish. The first
    failure (including cancellation) cancels the tiles that have not
    finished yet and is re-raised.
    """
    if concurrency < 1:
        msg = 'concurrency must be at least 1'
        raise ValueError(msg)
    sem = asyncio.Semaphore(concurrency)

    async def worker(tx: int, ty: int) -> None:
        async with sem:
            raise_if_cancelled(cancel)
            await process_tile(tx, ty)
        if on_done is not None:
            await on_done()

    tasks = [asyncio.create_task(worker(x, y)) for x, y in tiles]
    if not tasks:
        return
    try:
        await asyncio.gather(*tasks)
    except BaseException:
        for t in tasks:
            if not t.done():
                t.cancel()
        with contextlib.suppress(Exception):
            await asyncio.gather(*tasks, return_exceptions=True)
        raise
