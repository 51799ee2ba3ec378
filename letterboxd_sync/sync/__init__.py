"""
Folder-to-list synchronization for letterboxd-sync.

Components:
    - scanner: Folder listing and candidate name extraction
    - resolver: Candidate name -> film ID, cached and concurrency-bounded
    - fetcher: Complete list membership via cursor pagination
    - reconciler: Delta between local and remote film IDs
    - driver: Orchestration of one sync run

Usage:
    from letterboxd_sync.sync import run_sync

    report = await run_sync(config, list_id, folder, pattern, dry_run=True)
    print(report.delta.summary())
"""

from letterboxd_sync.sync.driver import SyncDriver, SyncReport, run_sync
from letterboxd_sync.sync.fetcher import fetch_all_film_ids
from letterboxd_sync.sync.reconciler import Delta, diff
from letterboxd_sync.sync.resolver import FilmResolver, resolve_candidates
from letterboxd_sync.sync.scanner import extract_candidate, scan_candidates

__all__ = [
    # Scanner
    "scan_candidates",
    "extract_candidate",
    # Resolver
    "FilmResolver",
    "resolve_candidates",
    # Fetcher
    "fetch_all_film_ids",
    # Reconciler
    "Delta",
    "diff",
    # Driver
    "SyncDriver",
    "SyncReport",
    "run_sync",
]
