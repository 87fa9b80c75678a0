# gunicorn.conf.py - Production configuration for the ingredient scanner API
import os
import multiprocessing

bind = f"0.0.0.0:{os.environ.get('PORT', 5000)}"

# Scoring is pure CPU work with no shared state, so workers scale with cores
workers = int(os.environ.get('WEB_CONCURRENCY', min(multiprocessing.cpu_count() * 2 + 1, 8)))
worker_class = "sync"

timeout = int(os.environ.get('TIMEOUT', 30))
keepalive = 5
max_requests = 1000
max_requests_jitter = 50

graceful_timeout = 30

# stdout logging, matching the print-based app logs
accesslog = "-"
errorlog = "-"
loglevel = "info"
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s" %(D)s'

# Request size limits
limit_request_line = 4094
limit_request_fields = 100
limit_request_field_size = 8190

# The reference database is loaded at import; share it across forked workers
preload_app = True

pythonpath = "."
chdir = "."


def when_ready(server):
    """Master is up; with preload_app the reference database is already validated"""
    print(f"INFO: Scanner API master {os.getpid()} ready on {bind} ({workers} workers, {timeout}s timeout)")


def post_fork(server, worker):
    print(f"INFO: Scanner worker {worker.pid} accepting requests")


def worker_exit(server, worker):
    print(f"INFO: Scanner worker {worker.pid} stopped")


def worker_abort(worker):
    # Sent SIGABRT by the master after the worker timeout
    print(f"WARNING: Scanner worker {worker.pid} aborted after {timeout}s")


def on_exit(server):
    print("INFO: Scanner API shutting down")


if os.environ.get('FLASK_ENV') == 'development':
    reload = True
    preload_app = False
    loglevel = "debug"
    print("WARNING: FLASK_ENV=development - reloading on code changes, preload disabled")
else:
    reload = False

print(f"INFO: Gunicorn configuration loaded - {workers} workers, {timeout}s timeout, bind {bind}")
