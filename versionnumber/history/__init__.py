"""Persistent build history."""

from versionnumber.history.storage import HistoryStore, job_dir_name, job_to_slug

__all__ = ["HistoryStore", "job_dir_name", "job_to_slug"]
