"""Report rendering and scoring."""
