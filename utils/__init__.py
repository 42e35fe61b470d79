"""Shared utilities for Flow Runner."""
