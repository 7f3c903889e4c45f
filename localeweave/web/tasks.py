"""
Asynchronous task helpers for long-running background translation jobs.
"""

from __future__ import annotations

import threading
import time
import uuid
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from localeweave.config import Configuration
from localeweave.logger import get_logger
from localeweave.translation.manager import TranslationManager
from localeweave.translation.progress import TranslationProgress

logger = get_logger(__name__)

FINISHED_STATES = ("completed", "failed", "cancelled")


@dataclass
class JobState:
    """In-memory representation of an asynchronous job."""

    job_id: str
    config: Configuration
    cancel_requested: bool = False
    state: str = "pending"  # pending|running|completed|failed|cancelled
    created_at: float = field(default_factory=time.time)
    started_at: Optional[float] = None
    finished_at: Optional[float] = None
    progress: Dict[str, Any] = field(default_factory=dict)
    progress_history: List[Dict[str, Any]] = field(default_factory=list)
    result: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    last_update: float = field(default_factory=time.time)

    @property
    def languages(self) -> List[str]:
        return [language.code for language in self.config.target_languages]

    def request_cancel(self):
        """Mark this job as requested for cancellation."""
        self.cancel_requested = True
        self.last_update = time.time()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "job_id": self.job_id,
            "state": self.state,
            "provider": self.config.provider,
            "languages": self.languages,
            "mode": self.config.translation_mode,
            "dry_run": self.config.dry_run,
            "cancel_requested": self.cancel_requested,
            "created_at": self.created_at,
            "started_at": self.started_at,
            "finished_at": self.finished_at,
            "progress": self.progress,
            "progress_history": list(self.progress_history),
            "result": self.result,
            "error": self.error,
            "last_update": self.last_update,
        }


_jobs: Dict[str, JobState] = {}
_jobs_lock = threading.Lock()
_JOB_RETENTION_SECONDS = 600  # Retain job info for 10 minutes after completion


def create_translation_job(config: Configuration) -> JobState:
    """
    Create and launch an asynchronous translation run.

    Args:
        config: Validated run configuration

    Returns:
        JobState for the new job (already registered and running in background)
    """
    job_id = uuid.uuid4().hex
    job_state = JobState(job_id=job_id, config=config)

    with _jobs_lock:
        _cleanup_jobs_locked()
        _jobs[job_id] = job_state

    thread = threading.Thread(
        target=_run_translation_job,
        args=(job_state,),
        name=f"translation-job-{job_id}",
        daemon=True,
    )
    thread.start()
    logger.info(
        "Translation job %s started (provider=%s, languages=%s, mode=%s)",
        job_id,
        config.provider,
        ", ".join(job_state.languages),
        config.translation_mode,
    )
    return job_state


def get_job(job_id: str) -> Optional[JobState]:
    """Fetch a job by ID (if still retained)."""
    with _jobs_lock:
        job = _jobs.get(job_id)
        if job and job.finished_at and (time.time() - job.finished_at) > _JOB_RETENTION_SECONDS:
            _jobs.pop(job_id, None)
            return None
        return job


def cancel_job(job_id: str) -> bool:
    """
    Request cancellation of a running job.

    Args:
        job_id: The job ID to cancel.

    Returns:
        True if job was found and cancellation requested, False otherwise.
    """
    with _jobs_lock:
        job = _jobs.get(job_id)
        if not job:
            return False
        if job.state in FINISHED_STATES:
            return False
        job.request_cancel()
        logger.info("Cancellation requested for job %s", job_id)
        return True


def serialize_job(job: JobState) -> Dict[str, Any]:
    """Convert JobState into JSON-safe dict."""
    with _jobs_lock:
        return job.to_dict()


def _run_translation_job(job: JobState):
    """Worker function executed in a background thread."""
    with _jobs_lock:
        job.state = "running"
        job.started_at = time.time()
        job.last_update = job.started_at

    manager = None
    try:
        def on_progress(progress: TranslationProgress):
            with _jobs_lock:
                serialized = _serialize_progress(progress)
                job.progress = serialized
                job.progress_history.append(serialized)
                job.last_update = time.time()

        def check_cancel():
            with _jobs_lock:
                return job.cancel_requested

        manager = TranslationManager(job.config, progress_callback=on_progress, cancel_check=check_cancel)
        outcome = manager.translate_all()

        with _jobs_lock:
            job.result = outcome.to_dict()
            if outcome.cancelled or job.cancel_requested:
                job.state = "cancelled"
            else:
                job.state = "completed" if outcome.success else "failed"
            job.finished_at = time.time()
            job.last_update = job.finished_at

        logger.info(
            "Translation job %s finished (state=%s, succeeded=%s, failed=%s)",
            job.job_id,
            job.state,
            outcome.success_count,
            outcome.failure_count,
        )
    except Exception as exc:
        error_type = type(exc).__name__
        error_message = str(exc)
        with _jobs_lock:
            job.state = "failed"
            job.error = f"{error_type}: {error_message}"
            job.finished_at = time.time()
            job.last_update = job.finished_at
        logger.exception(
            "✗ Translation job %s failed: %s: %s",
            job.job_id,
            error_type,
            error_message,
        )
    finally:
        if manager is not None:
            manager.close()


def _cleanup_jobs_locked():
    """Remove completed jobs that exceeded retention period (call with lock held)."""
    now = time.time()
    expired = [
        job_id
        for job_id, job in _jobs.items()
        if job.finished_at and (now - job.finished_at) > _JOB_RETENTION_SECONDS
    ]
    for job_id in expired:
        _jobs.pop(job_id, None)


def _serialize_progress(progress: TranslationProgress) -> Dict[str, Any]:
    return asdict(progress)
