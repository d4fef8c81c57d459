import multiprocessing
import os

# gunicorn -c docker/gunicorn_conf.py smart_pantry.main:app
wsgi_app = "smart_pantry.main:app"
bind = f"0.0.0.0:{os.getenv('PORT', '8000')}"
workers = int(os.getenv("WEB_CONCURRENCY", str(multiprocessing.cpu_count()))) or 1
worker_class = "uvicorn.workers.UvicornWorker"
# Keep above OPENAI_TIMEOUT_S so a slow generation surfaces as a 502, not a killed worker
timeout = max(int(os.getenv("TIMEOUT", "60")), int(float(os.getenv("OPENAI_TIMEOUT_S", "30"))) + 15)
keepalive = 5
graceful_timeout = 30
accesslog = "-"
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()
