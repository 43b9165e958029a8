"""
Module: render_engine
Purpose: Turn images that need rendering into artifacts on a bounded worker pool.
"""

import os
from concurrent.futures import (
    ALL_COMPLETED,
    BrokenExecutor,
    Executor,
    Future,
    ProcessPoolExecutor,
    ThreadPoolExecutor,
    wait,
)
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Set, Tuple

from . import imaging
from .exceptions import CodecError
from .models.gallery import Gallery
from .models.image import Image, Picture
from .models.resolution import Resolution
from .utils import ensure_directory, executor_mode, log_debug, log_error, log_info, log_warning

PICTURES_DIR_NAME = "p"
POLL_INTERVAL = 0.5

KIND_THUMB = "thumb"
KIND_DISPLAY = "disp"
KIND_FULL = "full"
KIND_BACKGROUND = "bg"

ROLE_PICTURE = "picture"
ROLE_BACKGROUND = "background"

ProgressCallback = Callable[[int, int], None]


@dataclass(frozen=True)
class RenderJob:
    """One artifact to produce from one source image."""

    kind: str
    collection: str
    identity: int
    source: str
    target: str
    resolution: Optional[Resolution] = None


@dataclass(frozen=True)
class RenderFailure:
    collection: str
    identity: int
    source: str
    target: str
    reason: str
    kind: str = KIND_FULL

    @property
    def role(self) -> str:
        return role_of_kind(self.kind)


@dataclass
class RenderSummary:
    scheduled: int = 0
    rendered: int = 0
    failures: List[RenderFailure] = field(default_factory=list)
    removed: int = 0


def role_of_kind(kind: str) -> str:
    return ROLE_BACKGROUND if kind == KIND_BACKGROUND else ROLE_PICTURE


def role_of_image(image: Image) -> str:
    return ROLE_PICTURE if isinstance(image, Picture) else ROLE_BACKGROUND


def artifact_dir(output_dir: str) -> str:
    return os.path.join(os.path.abspath(output_dir), PICTURES_DIR_NAME)


def artifact_name(identity: int, kind: str, extension: str) -> str:
    if kind == KIND_FULL:
        return f"{identity}.{extension}"
    return f"{identity}.{kind}.{extension}"


def _image_jobs(
    gallery: Gallery,
    key: str,
    image: Image,
    pictures_dir: str,
) -> List[RenderJob]:
    if isinstance(image, Picture):
        kinds = [
            (KIND_THUMB, gallery.res_thumb),
            (KIND_DISPLAY, gallery.res_display),
            (KIND_FULL, None),
        ]
    else:
        kinds = [(KIND_BACKGROUND, gallery.res_background)]
    jobs = []
    for kind, resolution in kinds:
        target = os.path.join(pictures_dir, artifact_name(image.identity, kind, gallery.extension))
        jobs.append(
            RenderJob(
                kind=kind,
                collection=key,
                identity=image.identity,
                source=image.source_path or "",
                target=target,
                resolution=resolution,
            )
        )
    return jobs


def build_jobs(gallery: Gallery, output_dir: str) -> Tuple[List[RenderJob], List[Image]]:
    """
    Expand every image that needs rendering into its missing artifact jobs.

    Targets that already exist are skipped, and each target is scheduled at
    most once.

    Returns:
        Tuple of (jobs, images that were considered for rendering).
    """
    pictures_dir = artifact_dir(output_dir)
    jobs: List[RenderJob] = []
    considered: List[Image] = []
    seen_targets: Set[str] = set()
    for key, image in gallery.iter_images():
        if not image.needs_render:
            continue
        if not image.source_path:
            log_warning(f"Image {image.stem} in '{key}' needs rendering but has no source; skipping")
            continue
        considered.append(image)
        for job in _image_jobs(gallery, key, image, pictures_dir):
            if job.target in seen_targets or os.path.exists(job.target):
                continue
            seen_targets.add(job.target)
            jobs.append(job)
    return jobs, considered


def _failure(job: RenderJob, reason: str) -> RenderFailure:
    return RenderFailure(
        collection=job.collection,
        identity=job.identity,
        source=job.source,
        target=job.target,
        reason=reason,
        kind=job.kind,
    )


def run_job(job: RenderJob, quality: int, method: str) -> Optional[RenderFailure]:
    """
    Produce one artifact. Errors are returned, never raised or logged,
    so worker processes never write to the run log.
    Designed to be used with a process pool.
    """
    try:
        if job.kind == KIND_FULL:
            imaging.recode(job.source, job.target, quality)
        else:
            imaging.render_resized(job.source, job.target, job.resolution, quality, method)
        return None
    except (CodecError, OSError) as exc:
        return _failure(job, str(exc))


def _submit(executor: Executor, job: RenderJob, quality: int, method: str) -> Future:
    if job.kind == KIND_FULL:
        log_debug(f"Recode {job.source} \t=> {job.target}")
    else:
        log_debug(f"Resize {job.source} \t=> {job.target} ({job.resolution})")
    try:
        return executor.submit(run_job, job, quality, method)
    except BrokenExecutor as exc:
        # A worker died while jobs were still being queued.
        future: Future = Future()
        future.set_exception(exc)
        return future


def _drain(
    executor: Executor,
    jobs: List[RenderJob],
    quality: int,
    method: str,
    progress: Optional[ProgressCallback],
) -> List[Future]:
    futures = [_submit(executor, job, quality, method) for job in jobs]
    total = len(futures)
    pending = set(futures)
    while pending:
        if progress is not None:
            progress(total - len(pending), total)
        _, pending = wait(pending, timeout=POLL_INTERVAL, return_when=ALL_COMPLETED)
    if progress is not None:
        progress(total, total)
    return futures


def _execute(
    jobs: List[RenderJob],
    quality: int,
    method: str,
    concurrency: int,
    progress: Optional[ProgressCallback],
) -> List[Future]:
    if executor_mode() == "process":
        try:
            with ProcessPoolExecutor(max_workers=concurrency) as executor:
                return _drain(executor, jobs, quality, method, progress)
        except (NotImplementedError, PermissionError, OSError) as exc:
            log_warning(f"ProcessPool unavailable, falling back to ThreadPool for rendering: {exc}")
    with ThreadPoolExecutor(max_workers=concurrency) as executor:
        return _drain(executor, jobs, quality, method, progress)


def _run_isolated(job: RenderJob, quality: int, method: str) -> Optional[RenderFailure]:
    """
    Re-run one job in a dedicated worker process so that a crash only
    takes this job down.
    """
    try:
        with ProcessPoolExecutor(max_workers=1) as executor:
            return executor.submit(run_job, job, quality, method).result()
    except BrokenExecutor as exc:
        return _failure(job, f"Worker process terminated abruptly: {exc}")


def _collect(
    jobs: List[RenderJob],
    futures: List[Future],
    quality: int,
    method: str,
) -> List[Optional[RenderFailure]]:
    outcomes: List[Optional[RenderFailure]] = []
    interrupted: List[RenderJob] = []
    for job, future in zip(jobs, futures):
        try:
            outcomes.append(future.result())
        except BrokenExecutor:
            interrupted.append(job)
    if interrupted:
        log_warning(
            f"A render worker terminated abruptly; retrying {len(interrupted)} job(s) one at a time"
        )
        outcomes.extend(_run_isolated(job, quality, method) for job in interrupted)
    return outcomes


def remove_failed(gallery: Gallery, failures: List[RenderFailure]) -> int:
    """
    Drop failed images from the gallery.

    The owning collection loses every entry with the failed identity. Other
    collections only lose entries of the same role (picture or background),
    since only those point at the missing artifacts.

    Returns:
        Number of removed entries.
    """
    removed = 0
    handled: Set[Tuple[str, int, str]] = set()
    for failure in failures:
        key = (failure.collection, failure.identity, failure.role)
        if key in handled:
            continue
        handled.add(key)
        owner = gallery.collections.get(failure.collection)
        if owner is not None:
            removed += owner.remove_by_identity(failure.identity)
        same_role = {
            "pictures": failure.role == ROLE_PICTURE,
            "backgrounds": failure.role == ROLE_BACKGROUND,
        }
        for name in gallery.collection_keys:
            if name == failure.collection:
                continue
            count = gallery.collections[name].remove_by_identity(failure.identity, **same_role)
            if count:
                log_warning(
                    f"Removed duplicate {failure.role} reference {failure.identity} from '{name}' "
                    "after render failure"
                )
            removed += count
    if handled:
        log_info(f"Removed {removed} invalid entr{'y' if removed == 1 else 'ies'} from gallery")
    return removed


def render_all(
    gallery: Gallery,
    output_dir: str,
    quality: int,
    method: str,
    concurrency: int,
    progress: Optional[ProgressCallback] = None,
) -> RenderSummary:
    """
    Render every missing artifact of the gallery and prune failed images.

    Args:
        gallery: Gallery to render; mutated only after the pool has drained.
        output_dir: Gallery output directory; artifacts go to <output_dir>/p.
        quality: JPEG quality, 1-100.
        method: Resize filter name.
        concurrency: Maximum number of concurrent workers (at least 1).
        progress: Optional callback receiving (done, total) while waiting.

    Returns:
        RenderSummary with counts and the recorded failures.
    """
    if concurrency < 1:
        raise ValueError("concurrency must be at least 1")
    ensure_directory(artifact_dir(output_dir))

    jobs, considered = build_jobs(gallery, output_dir)
    summary = RenderSummary(scheduled=len(jobs))
    log_info(f"Working on pictures... ({len(jobs)} artifact(s) to render)")

    futures = _execute(jobs, quality, method, concurrency, progress) if jobs else []

    # The executor has shut down: every worker is gone and results are final.
    for failure in _collect(jobs, futures, quality, method):
        if failure is None:
            summary.rendered += 1
        else:
            log_error(f"Could not process picture {failure.source}: {failure.reason}")
            summary.failures.append(failure)

    summary.removed = remove_failed(gallery, summary.failures)
    failed = {(failure.identity, failure.role) for failure in summary.failures}
    for image in considered:
        if (image.identity, role_of_image(image)) not in failed:
            image.needs_render = False
    log_info(
        f"Rendering done: {summary.rendered} rendered, {len(summary.failures)} failed, "
        f"{summary.removed} entr{'y' if summary.removed == 1 else 'ies'} removed"
    )
    return summary
