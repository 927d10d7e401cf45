"""envguard — static analysis of environment variable usage and declarations."""

__version__ = "0.1.0"
