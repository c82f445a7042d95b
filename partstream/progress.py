"""Terminal progress bar for streaming uploads."""

from __future__ import annotations

from typing import Any

from tqdm import tqdm

from partstream.event_emitter import Emitter
from partstream.models import PartProgress


def attach_progress_bar(
    emitter: Emitter,
    total: int | None = None,
    description: str = "Uploading",
    **tqdm_kwargs: Any,
) -> tqdm:
    """Show upload progress with a tqdm bar driven by engine notifications.

    The bar advances by the size of each completed part and is closed when
    the upload completes or fails.

    Args:
        emitter: Emitter of the engine to follow.
        total: Expected size in bytes, if known. Streams usually do not know it.
        description: Label shown in front of the bar.
        **tqdm_kwargs: Passed through to ``tqdm``.

    Returns:
        The progress bar.
    """
    bar = tqdm(
        total=total,
        desc=description,
        unit="B",
        unit_scale=True,
        unit_divisor=1024,
        **tqdm_kwargs,
    )

    def _on_part(progress: PartProgress) -> None:
        bar.update(progress.byte_count)
        bar.set_postfix(part=progress.sequence_number)

    def _on_done(*_: Any) -> None:
        bar.close()

    emitter.on(Emitter.PART_UPLOADED, _on_part)
    emitter.on(Emitter.UPLOADED, _on_done)
    emitter.on(Emitter.UPLOAD_FAILED, _on_done)
    return bar
