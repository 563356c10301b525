"""Shared infrastructure: logging, settings, clock and timers."""
