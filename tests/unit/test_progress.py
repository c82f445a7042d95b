import io

from partstream.event_emitter import Emitter
from partstream.models import CompletedUpload, Destination, PartProgress
from partstream.progress import attach_progress_bar


def _progress(number: int, size: int, uploaded: int) -> PartProgress:
    return PartProgress(
        sequence_number=number,
        completion_tag=f"tag-{number}",
        byte_count=size,
        bytes_received=uploaded,
        bytes_uploaded=uploaded,
    )


def test_bar_advances_per_part_and_closes_on_completion() -> None:
    emitter = Emitter()
    bar = attach_progress_bar(emitter, total=150, file=io.StringIO())

    emitter.emit(Emitter.PART_UPLOADED, _progress(1, 100, 100))
    emitter.emit(Emitter.PART_UPLOADED, _progress(2, 50, 150))
    assert bar.n == 150

    emitter.emit(
        Emitter.UPLOADED,
        CompletedUpload(
            destination=Destination(bucket="b", key="k"),
            location="s3://b/k",
            completion_tag='"e"',
        ),
    )
    assert bar.disable


def test_bar_closes_on_failure() -> None:
    emitter = Emitter()
    bar = attach_progress_bar(emitter, file=io.StringIO())

    emitter.emit(Emitter.UPLOAD_FAILED, RuntimeError("boom"))

    assert bar.disable
