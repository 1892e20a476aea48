from .docs import DocGenerationJob
from .queue import (
    Job,
    JobCompleted,
    JobEnqueued,
    JobEvent,
    JobFailed,
    JobQueue,
    JobStarted,
    JobSubscription,
    QueueClosedError,
    log_job_events,
)

__all__ = [
    "DocGenerationJob",
    "Job",
    "JobCompleted",
    "JobEnqueued",
    "JobEvent",
    "JobFailed",
    "JobQueue",
    "JobStarted",
    "JobSubscription",
    "QueueClosedError",
    "log_job_events",
]
