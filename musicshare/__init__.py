"""Music sharing backend."""
