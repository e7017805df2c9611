"""REST API routers. Mounted under /api by main.py."""
