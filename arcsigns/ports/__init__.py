"""Ports (protocol interfaces) consumed by the arcsigns core."""
