"""
Application rate limiter (slowapi).

Keyed by the Authorization header so each token gets its own bucket;
anonymous requests share the "anonymous" bucket.
"""
from slowapi import Limiter

from recordhub.core import config
from recordhub.features.users.dependencies import get_authorization_header

limiter = Limiter(key_func=get_authorization_header, enabled=config.RATE_LIMIT_ENABLED)
