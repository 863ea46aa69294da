"""Helpers for KUDO operator repositories, health checks and cluster queries."""

__version__ = "0.1.0"