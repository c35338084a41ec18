"""
Gunicorn configuration for the space booking service.

    gunicorn -c gunicorn.conf.py wsgi:application

Bind address and worker count come from GUNICORN_BIND / GUNICORN_WORKERS.
"""

import os

wsgi_app = 'wsgi:application'

bind = os.environ.get('GUNICORN_BIND', '0.0.0.0:8000')

# Booking writes serialize on SQLite's write lock (BEGIN IMMEDIATE), so a
# few threaded workers are enough for a school's traffic.
workers = int(os.environ.get('GUNICORN_WORKERS', 2))
threads = int(os.environ.get('GUNICORN_THREADS', 4))
worker_class = 'gthread'

# Login attempts are counted per worker process; the effective limit is
# RATELIMIT_MAX_ATTEMPTS times the number of workers.

# A new request mails every manager of the space in turn, each SMTP call
# with its own 10s timeout.
timeout = int(os.environ.get('GUNICORN_TIMEOUT', 60))
graceful_timeout = 30
keepalive = 5

# Same directory as the application log (logs/space_booking.log)
os.makedirs('logs', exist_ok=True)
accesslog = os.environ.get('GUNICORN_ACCESS_LOG', 'logs/gunicorn-access.log')
errorlog = os.environ.get('GUNICORN_ERROR_LOG', 'logs/gunicorn-error.log')
loglevel = os.environ.get('GUNICORN_LOG_LEVEL', 'info')
access_log_format = '%(h)s %(u)s %(t)s "%(r)s" %(s)s %(b)s %(D)s'

proc_name = 'space_booking'

# The app opens no database connection at import time, so it is safe to
# load once in the master.
preload_app = True

# JSON API only: small request lines and headers
limit_request_line = 4094
limit_request_fields = 50
limit_request_field_size = 8190
