"""
Redis-based option and meta storage.

This module provides the persistence layer for site options (settings, bidder
data, the ad product registry) and per-object meta such as ad product fields.
Values are JSON-serialized; every key is namespaced with the configured prefix.
"""

import json
from typing import Any, Dict, Optional
import redis

from ads_manager.config import redis_config
from ads_manager.utils.logging import setup_logger

logger = setup_logger(__name__)

class OptionStore:
    """Redis option and meta store."""

    def __init__(self, client: Optional[redis.Redis] = None, prefix: Optional[str] = None):
        """
        Initialize the store.

        Args:
            client: Optional Redis client, created from configuration when omitted
            prefix: Optional key prefix, defaults to the configured prefix
        """
        self.redis = client or redis.from_url(
            redis_config.url,
            password=redis_config.password,
            decode_responses=True
        )
        self.prefix = redis_config.prefix if prefix is None else prefix

    def _get_key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def _meta_key(self, object_id: int) -> str:
        return self._get_key(f"meta:{object_id}")

    @staticmethod
    def _decode(value: Optional[str], default: Any) -> Any:
        if value is None:
            return default
        try:
            return json.loads(value)
        except json.JSONDecodeError as e:
            logger.error(f"JSON decode error: {e}")
            return default

    def get_option(self, key: str, default: Any = None) -> Any:
        """
        Get an option value.

        Args:
            key: Option name
            default: Value returned when the option is not stored

        Returns:
            Any: Deserialized option value or the default
        """
        try:
            value = self.redis.get(self._get_key(key))
        except redis.RedisError as e:
            logger.error(f"Redis error in get_option: {e}")
            return default
        return self._decode(value, default)

    def update_option(self, key: str, value: Any) -> bool:
        """
        Store an option value.

        Returns:
            bool: True if the stored value changed
        """
        encoded = json.dumps(value)
        try:
            current = self.redis.get(self._get_key(key))
            if current == encoded:
                return False
            self.redis.set(self._get_key(key), encoded)
            return True
        except redis.RedisError as e:
            logger.error(f"Redis error in update_option: {e}")
            raise

    def delete_option(self, key: str) -> bool:
        """Delete an option. Returns True if it existed."""
        try:
            return bool(self.redis.delete(self._get_key(key)))
        except redis.RedisError as e:
            logger.error(f"Redis error in delete_option: {e}")
            raise

    def get_meta(self, object_id: int, key: str, default: Any = None) -> Any:
        """Get a single meta value for an object."""
        try:
            value = self.redis.hget(self._meta_key(object_id), key)
        except redis.RedisError as e:
            logger.error(f"Redis error in get_meta: {e}")
            return default
        return self._decode(value, default)

    def get_all_meta(self, object_id: int) -> Dict[str, Any]:
        """Get every meta value stored for an object."""
        try:
            values = self.redis.hgetall(self._meta_key(object_id))
        except redis.RedisError as e:
            logger.error(f"Redis error in get_all_meta: {e}")
            return {}
        return {key: self._decode(value, None) for key, value in values.items()}

    def update_meta(self, object_id: int, key: str, value: Any) -> None:
        """Store a single meta value for an object."""
        try:
            self.redis.hset(self._meta_key(object_id), key, json.dumps(value))
        except redis.RedisError as e:
            logger.error(f"Redis error in update_meta: {e}")
            raise

    def delete_meta(self, object_id: int) -> None:
        """Delete every meta value stored for an object."""
        try:
            self.redis.delete(self._meta_key(object_id))
        except redis.RedisError as e:
            logger.error(f"Redis error in delete_meta: {e}")
            raise

    def next_id(self, sequence: str) -> int:
        """Allocate the next integer id from a named sequence."""
        try:
            return int(self.redis.incr(self._get_key(f"seq:{sequence}")))
        except redis.RedisError as e:
            logger.error(f"Redis error in next_id: {e}")
            raise
