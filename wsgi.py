"""WSGI entrypoint for Gunicorn.

The game cycle runs inside the worker, so use exactly one worker with threads:
  gunicorn -w 1 --threads 8 -b 0.0.0.0:8000 wsgi:app
"""

from keno import create_app

app = create_app()
