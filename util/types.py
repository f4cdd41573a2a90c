# util/types.py
from typing import TypedDict


class QueueCounts(TypedDict):
    waiting: int
    active: int
    total_jobs_stored: int
