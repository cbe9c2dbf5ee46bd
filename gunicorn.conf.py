"""
Gunicorn configuration for the Magic Mirror server.

Usage:
    gunicorn mirror.main:app -c gunicorn.conf.py
"""

import os

# Bind to all interfaces so the display and admin phones on the LAN can reach it
bind = os.getenv("BIND", "0.0.0.0:8000")

# Small device, SQLite by default: keep the worker count low
workers = int(os.getenv("WEB_CONCURRENCY", "2"))

# Use Uvicorn's ASGI worker for FastAPI
worker_class = "uvicorn.workers.UvicornWorker"

# Request timeout (seconds), covers the AI briefing call
timeout = 60

# Keep-alive connections (seconds)
keepalive = 5

# Logging
accesslog = "-"  # stdout
errorlog = "-"   # stderr
loglevel = "info"
