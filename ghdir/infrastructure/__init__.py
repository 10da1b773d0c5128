"""
Cross-cutting infrastructure: logging, errors, retries and rate limits.
"""
