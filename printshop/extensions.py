"""
Shared Flask extension instances.

Kept in a separate module so blueprints can decorate routes with the
limiter before the application factory has run.
"""

from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

# Storage backend comes from RATELIMIT_STORAGE_URI; init_app() is called in
# create_app().
limiter = Limiter(
    get_remote_address,
    default_limits=["200 per minute"],
)
