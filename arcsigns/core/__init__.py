"""Core processing shared by the adapters."""
