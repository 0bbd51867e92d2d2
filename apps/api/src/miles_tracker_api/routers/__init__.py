"""Route handlers mounted under ``/api``."""
