"""arcsigns - async command layer over the arc version-control backend."""
