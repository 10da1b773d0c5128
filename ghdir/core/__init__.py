"""
Core download logic: URL resolution, the download orchestrator and its
concurrency and cancellation primitives.
"""
