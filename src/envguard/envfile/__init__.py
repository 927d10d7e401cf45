"""Declaration file (.env) parsing and checks."""
