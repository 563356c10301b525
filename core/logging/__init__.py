"""Logging helpers for the kiosk rotator."""
