import multiprocessing
import os

# Sessions and perk windows need REDIS_URL once more than one worker runs;
# the in-memory fallback is per process.
wsgi_app = "memento:create_app()"
workers = int(os.environ.get('WEB_CONCURRENCY', (multiprocessing.cpu_count() * 2) + 1))
threads = 2
worker_class = "gthread"
preload_app = True
bind = os.environ.get('BIND', ':8000')
# Heroku/Render style proxy headers
forwarded_allow_ips = "*"
timeout = 60
keepalive = 75
# Access logging
accesslog = "-"
errorlog = "-"
loglevel = os.environ.get('LOG_LEVEL', 'info').lower()
