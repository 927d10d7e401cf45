"""Per-framework environment variable rules."""
