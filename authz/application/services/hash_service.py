"""Hash service for audit chain integrity (canonical JSON + algorithm)."""

from __future__ import annotations

import hashlib
import json
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any

from authz.shared.utils.datetime import ensure_utc


class HashAlgorithm(ABC):
    """Abstract hash algorithm (OCP)."""

    @abstractmethod
    def hash(self, data: str) -> str:
        """Compute hash of input string."""
        ...


class SHA256Algorithm(HashAlgorithm):
    """SHA-256 implementation."""

    def hash(self, data: str) -> str:
        return hashlib.sha256(data.encode()).hexdigest()


class HashService:
    """Single source of truth for audit entry hash computation."""

    def __init__(self, algorithm: HashAlgorithm | None = None) -> None:
        self.algorithm = algorithm or SHA256Algorithm()

    @staticmethod
    def canonical_json(data: dict[str, Any]) -> str:
        """Canonical JSON for deterministic hashing."""
        return json.dumps(data, sort_keys=True, separators=(",", ":"), default=str)

    def compute_entry_hash(
        self,
        *,
        sequence: int,
        timestamp: datetime,
        actor_id: int | None,
        actor_type: str,
        actor_name: str | None,
        actor_email: str | None,
        action: str,
        resource_type: str,
        resource_action: str | None,
        role_id: int | None,
        target_user_id: int | None,
        old_value: dict[str, Any] | None,
        new_value: dict[str, Any] | None,
        ip_address: str | None,
        user_agent: str | None,
        request_id: str | None,
        previous_hash: str | None,
    ) -> str:
        """Compute hash for one audit entry, chained to its predecessor.

        Covers every stored column except id and entry_hash.

        Timestamps are normalized to UTC and truncated to microseconds so a
        value read back from any backend hashes identically.
        """
        ts = ensure_utc(timestamp) or timestamp
        hash_content = {
            "sequence": sequence,
            "timestamp": ts.isoformat(timespec="microseconds"),
            "actor_id": actor_id,
            "actor_type": actor_type,
            "actor_name": actor_name,
            "actor_email": actor_email,
            "action": action,
            "resource_type": resource_type,
            "resource_action": resource_action,
            "role_id": role_id,
            "target_user_id": target_user_id,
            "old_value": old_value,
            "new_value": new_value,
            "ip_address": ip_address,
            "user_agent": user_agent,
            "request_id": request_id,
            "previous_hash": previous_hash,
        }
        return self.algorithm.hash(self.canonical_json(hash_content))
