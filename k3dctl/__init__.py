"""Helpers for preparing and describing k3s clusters that run in containers."""

__version__ = "0.1.0"