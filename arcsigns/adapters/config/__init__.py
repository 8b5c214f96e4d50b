"""Configuration adapters."""
