"""Settings for production.

Values here override ``components/``; secrets must come from the environment.
"""

from server.settings.components import config

DEBUG = config('DJANGO_DEBUG', cast=bool, default=False)

SECRET_KEY = config('DJANGO_SECRET_KEY')

SECURE_PROXY_SSL_HEADER = ('HTTP_X_FORWARDED_PROTO', 'https')
SECURE_SSL_REDIRECT = config('DJANGO_SECURE_SSL_REDIRECT', cast=bool, default=True)
SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True
