"""
MFA record storage

The registry only needs get/set/delete by user identifier, so the backing
store is a small protocol. The in-memory store has process-lifetime scope;
the Redis store lets several service instances share records.
"""

from __future__ import annotations

import json
import threading
from dataclasses import asdict, dataclass
from typing import Dict, Optional, Protocol

from loguru import logger
from redis import ConnectionPool, Redis, RedisError

from web3_signer.core.config import Settings
from web3_signer.exceptions import MfaStoreError


@dataclass
class MfaRecord:
    """
    MFA state for one user identifier.

    Attributes:
        secret: Permanent base32 secret, empty until setup is confirmed
        temp_secret: Secret issued by an in-progress setup
        enabled: Whether the permanent secret gates login
    """

    secret: str = ""
    temp_secret: Optional[str] = None
    enabled: bool = False

    @property
    def has_secret(self) -> bool:
        return bool(self.secret or self.temp_secret)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "MfaRecord":
        return cls(
            secret=data.get("secret") or "",
            temp_secret=data.get("temp_secret") or None,
            enabled=bool(data.get("enabled", False)),
        )


class MfaStore(Protocol):
    """Key-value interface over MFA records, keyed by user identifier."""

    def get(self, user_identifier: str) -> Optional[MfaRecord]:
        ...

    def set(self, user_identifier: str, record: MfaRecord) -> None:
        ...

    def delete(self, user_identifier: str) -> None:
        ...

    def ping(self) -> bool:
        ...


class InMemoryMfaStore:
    """
    Dict-backed store.

    Each call is atomic under a lock; sequences of calls are not, so two
    concurrent setups for one identifier resolve last-write-wins.
    Records are copied on the way in and out so callers cannot mutate
    stored state without going through set().
    """

    def __init__(self) -> None:
        self._records: Dict[str, MfaRecord] = {}
        self._lock = threading.Lock()

    def get(self, user_identifier: str) -> Optional[MfaRecord]:
        with self._lock:
            record = self._records.get(user_identifier)
            return MfaRecord(**record.to_dict()) if record else None

    def set(self, user_identifier: str, record: MfaRecord) -> None:
        with self._lock:
            self._records[user_identifier] = MfaRecord(**record.to_dict())

    def delete(self, user_identifier: str) -> None:
        with self._lock:
            self._records.pop(user_identifier, None)

    def ping(self) -> bool:
        return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


class RedisMfaStore:
    """Redis-backed store, one JSON value per identifier."""

    def __init__(self, client: Redis, key_prefix: str = "mfa:") -> None:
        self.client = client
        self.key_prefix = key_prefix

    @classmethod
    def from_url(cls, url: str, key_prefix: str = "mfa:") -> "RedisMfaStore":
        pool = ConnectionPool.from_url(url, decode_responses=True)
        return cls(Redis(connection_pool=pool), key_prefix=key_prefix)

    def _key(self, user_identifier: str) -> str:
        return f"{self.key_prefix}{user_identifier}"

    def get(self, user_identifier: str) -> Optional[MfaRecord]:
        try:
            raw = self.client.get(self._key(user_identifier))
        except RedisError as exc:
            raise MfaStoreError(f"Failed to read MFA record: {exc}") from exc
        if raw is None:
            return None
        try:
            return MfaRecord.from_dict(json.loads(raw))
        except (TypeError, ValueError) as exc:
            raise MfaStoreError(f"Corrupt MFA record for key {self._key(user_identifier)}") from exc

    def set(self, user_identifier: str, record: MfaRecord) -> None:
        try:
            self.client.set(self._key(user_identifier), json.dumps(record.to_dict()))
        except RedisError as exc:
            raise MfaStoreError(f"Failed to write MFA record: {exc}") from exc

    def delete(self, user_identifier: str) -> None:
        try:
            self.client.delete(self._key(user_identifier))
        except RedisError as exc:
            raise MfaStoreError(f"Failed to delete MFA record: {exc}") from exc

    def ping(self) -> bool:
        try:
            return bool(self.client.ping())
        except RedisError:
            return False

    def close(self) -> None:
        """Close Redis connection"""
        self.client.close()


def build_store(settings: Settings) -> MfaStore:
    """Create the MFA store selected by settings.mfa_store_backend."""
    if settings.mfa_store_backend == "redis":
        logger.info(f"Using Redis MFA store with key prefix '{settings.redis_key_prefix}'")
        return RedisMfaStore.from_url(settings.redis_url, key_prefix=settings.redis_key_prefix)

    logger.info("Using in-memory MFA store (records are lost on restart)")
    return InMemoryMfaStore()
