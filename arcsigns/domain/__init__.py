"""Domain models for arcsigns."""
