"""PostgreSQL TTL store for suggestion jobs."""

from __future__ import annotations

import asyncio
import json
from typing import Any

import asyncpg  # type: ignore[import-untyped]

from notfound_suggestions.domain.ports import ConditionalJobStore, JobStore, PurgeableJobStore


class PostgresJobStore(JobStore, ConditionalJobStore, PurgeableJobStore):
    """Job store backed by one PostgreSQL table with an expiry column.

    Expired rows stay on disk until overwritten or purged but are never
    returned by reads.
    """

    def __init__(
        self,
        dsn: str,
        min_pool_size: int = 1,
        max_pool_size: int = 10,
    ) -> None:
        self._dsn = dsn
        self._min_pool_size = min_pool_size
        self._max_pool_size = max_pool_size
        self._pool: asyncpg.Pool | None = None
        self._pool_lock = asyncio.Lock()

    async def get(self, key: str) -> Any | None:
        """Return live value."""

        pool = await self._get_pool()
        row = await pool.fetchrow(
            """
            SELECT value
            FROM suggestion_jobs
            WHERE job_key = $1
              AND expires_at > NOW()
            """,
            key,
        )
        if row is None:
            return None
        return self._decode_json_field(row["value"])

    async def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        """Insert or replace value with a fresh expiry."""

        pool = await self._get_pool()
        await pool.execute(
            """
            INSERT INTO suggestion_jobs (job_key, value, expires_at)
            VALUES ($1, $2::jsonb, NOW() + ($3::double precision * INTERVAL '1 second'))
            ON CONFLICT (job_key) DO UPDATE
            SET
                value = EXCLUDED.value,
                expires_at = EXCLUDED.expires_at
            """,
            key,
            json.dumps(value),
            max(ttl_seconds, 1),
        )

    async def delete(self, key: str) -> None:
        """Remove value."""

        pool = await self._get_pool()
        await pool.execute("DELETE FROM suggestion_jobs WHERE job_key = $1", key)

    async def set_if_unchanged(
        self,
        key: str,
        expected: Any,
        value: Any,
        ttl_seconds: int,
    ) -> bool:
        """Conditional write; JSONB equality ignores key order."""

        pool = await self._get_pool()
        ttl = max(ttl_seconds, 1)
        if expected is None:
            result = await pool.execute(
                """
                INSERT INTO suggestion_jobs (job_key, value, expires_at)
                VALUES ($1, $2::jsonb, NOW() + ($3::double precision * INTERVAL '1 second'))
                ON CONFLICT (job_key) DO UPDATE
                SET
                    value = EXCLUDED.value,
                    expires_at = EXCLUDED.expires_at
                WHERE suggestion_jobs.expires_at <= NOW()
                """,
                key,
                json.dumps(value),
                ttl,
            )
            return result.endswith("1")

        result = await pool.execute(
            """
            UPDATE suggestion_jobs
            SET
                value = $3::jsonb,
                expires_at = NOW() + ($4::double precision * INTERVAL '1 second')
            WHERE job_key = $1
              AND expires_at > NOW()
              AND value = $2::jsonb
            """,
            key,
            json.dumps(expected),
            json.dumps(value),
            ttl,
        )
        return result.endswith("1")

    async def purge_expired(self) -> int:
        """Delete expired rows and return how many were removed."""

        pool = await self._get_pool()
        result = await pool.execute("DELETE FROM suggestion_jobs WHERE expires_at <= NOW()")
        return int(result.rsplit(" ", 1)[-1])

    async def close(self) -> None:
        """Close the pool if it was initialized."""

        pool = self._pool
        self._pool = None
        if pool is not None:
            await pool.close()

    async def _get_pool(self) -> asyncpg.Pool:
        if self._pool is not None:
            return self._pool

        async with self._pool_lock:
            pool = self._pool
            if pool is None:
                pool = await asyncpg.create_pool(
                    dsn=self._dsn,
                    min_size=self._min_pool_size,
                    max_size=self._max_pool_size,
                )
                await self._ensure_schema(pool)
                self._pool = pool
            return pool

    async def _ensure_schema(self, pool: asyncpg.Pool) -> None:
        await pool.execute(
            """
            CREATE TABLE IF NOT EXISTS suggestion_jobs (
                job_key TEXT PRIMARY KEY,
                value JSONB NOT NULL,
                expires_at TIMESTAMPTZ NOT NULL
            );
            CREATE INDEX IF NOT EXISTS idx_suggestion_jobs_expires_at
                ON suggestion_jobs (expires_at);
            """
        )

    def _decode_json_field(self, value: object) -> Any:
        if value is None:
            return None
        if isinstance(value, str):
            return json.loads(value)
        return value


__all__ = ["PostgresJobStore"]
