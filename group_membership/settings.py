from decouple import Choices, config

DEBUG = config('DEBUG', default=False, cast=bool)
ENVIRONMENT = config('ENVIRONMENT', default='local', cast=Choices(['local', 'testing', 'staging', 'production']))
IS_TESTING = ENVIRONMENT == 'testing'  # Set in tests/conftest.py
IS_DEPLOYED_ENV = ENVIRONMENT in ('staging', 'production')

LOG_LEVEL = config('LOG_LEVEL', 'INFO')

# Tagged cache for resolved memberships / group references
CACHE_BACKEND = config('CACHE_BACKEND', default='memory', cast=Choices(['memory', 'redis']))
CACHE_KEY_PREFIX = config('CACHE_KEY_PREFIX', default='gm')

REDIS_URL = config('REDIS_URL', default='redis://localhost:6379')
REDIS_CACHE_DB = config('REDIS_CACHE_DB', default=0, cast=int)
