"""Settings for local development and tests."""

from server.settings.components import config

DEBUG = config('DJANGO_DEBUG', cast=bool, default=True)

SECRET_KEY = config(
    'DJANGO_SECRET_KEY',
    default='development-only-insecure-secret-key',
)

ALLOWED_HOSTS = ['localhost', '127.0.0.1', '[::1]', 'testserver']
