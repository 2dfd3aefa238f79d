"""Scrapers that read MySQL server statistics into Prometheus-style metrics."""

__version__ = "0.1.0"