import os

# Bind & workers
bind = os.environ.get("GUNICORN_BIND", "0.0.0.0:8000")
workers = int(os.environ.get("GUNICORN_WORKERS", "2"))
threads = int(os.environ.get("GUNICORN_THREADS", "1"))
timeout = 60
graceful_timeout = 30
keepalive = 5
wsgi_app = "wsgi:app"

# Logs to stdout/stderr; the app emits JSON lines itself
accesslog = "-"
errorlog = "-"
loglevel = os.environ.get("LOG_LEVEL", "info").lower()

# Trust proxy headers (pair with USE_PROXYFIX)
forwarded_allow_ips = os.environ.get("FORWARDED_ALLOW_IPS", "*")
proxy_protocol = False
