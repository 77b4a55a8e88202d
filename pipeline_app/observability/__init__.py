"""Observability helpers.

Request IDs + structlog contextvars for access logs, plus Prometheus series
exposed on `/metrics`.
"""
