import multiprocessing
import os

bind = os.getenv("GUNICORN_BIND", "unix:/run/farmops/gunicorn.sock")
workers = int(os.getenv("GUNICORN_WORKERS", multiprocessing.cpu_count() * 2 + 1))
worker_class = "sync"
worker_tmp_dir = "/dev/shm"
max_requests = 1000
max_requests_jitter = 100
# Report exports render PDF and Excel in the request
timeout = int(os.getenv("GUNICORN_TIMEOUT", 120))
keepalive = 5

# Logging
accesslog = os.getenv("GUNICORN_ACCESS_LOG", "-")
errorlog = os.getenv("GUNICORN_ERROR_LOG", "-")
loglevel = os.getenv("LOG_LEVEL", "info").lower()
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(a)s" %(D)s'

proc_name = "farmops-backend"
daemon = False
umask = 0o007


def when_ready(server):
    server.log.info("Farm operations API ready, spawning workers")


def worker_abort(worker):
    worker.log.info("Worker received SIGABRT signal")
