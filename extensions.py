"""
Shared Flask extensions.

Instantiated here and bound in create_app() so blueprints can import them
without circular imports.
"""

from __future__ import annotations

from flask_compress import Compress
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

limiter = Limiter(key_func=get_remote_address, default_limits=["300 per hour"])

compress = Compress()
