"""
WSGI entry point for production deployment.

Example:
    gunicorn -w 1 --threads 100 wsgi:application

Run a single worker: auction locks and live push are per process.
Set SECRET_KEY, ADMIN_USERNAME, ADMIN_PASSWORD_HASH and DATABASE_URL in the
environment before starting.
"""

import os

os.environ.setdefault('FLASK_CONFIG', 'production')

from franchise_auction import create_app  # noqa: E402

application = create_app(os.environ.get('FLASK_CONFIG', 'production'))
