"""
Services module for the Starboard Evaluation API.
"""

from starboard.services.cache import get_cache, reset_cache
from starboard.services.redis_cache import RedisCache
from starboard.services.database import get_connection, init_schema
