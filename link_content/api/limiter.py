"""
Shared rate limiter.

Created unbound so blueprints can decorate routes at import time;
``create_app`` binds it with ``init_app``, which reads
``RATELIMIT_ENABLED`` and ``RATELIMIT_STORAGE_URI`` from the app config.
"""

from flask_limiter import Limiter
from flask_limiter.util import get_remote_address


limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["1000 per hour"]
)
