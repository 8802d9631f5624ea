"""Operational logging helpers."""
