"""Gunicorn configuration for production.

Run with: gunicorn -c gunicorn.conf.py 'quroosh:create_app()'

Each worker process builds its own app and therefore its own gold quote
cache, so every worker refreshes the gold price on its own schedule.
"""
import os

# Server socket
bind = f"0.0.0.0:{os.environ.get('PORT', '8080')}"

# Worker processes
workers = int(os.environ.get('WEB_CONCURRENCY', '2'))
worker_class = 'sync'

# Upstream gold price calls time out after GOLD_PROVIDER_TIMEOUT_SECONDS each
timeout = 30
keepalive = 2

# Logging
accesslog = '-'
errorlog = '-'
loglevel = os.environ.get('LOG_LEVEL', 'info')

# Process naming
proc_name = 'quroosh-zakat'
