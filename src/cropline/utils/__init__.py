"""Shared utilities for cropline."""
