"""User-visible message adapters."""
