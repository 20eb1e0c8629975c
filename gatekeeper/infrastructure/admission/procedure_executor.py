"""Atomic procedure executor backed by Redis Lua scripts.

Every check-then-act step of the admission core runs as one Lua script, so
the store serializes it against every other worker and no client-side lock is
needed. Scripts are loaded once (SCRIPT LOAD), their SHA is cached, and each
call is an EVALSHA.

Failure mapping:
    ConnectionError / TimeoutError      -> ADMISSION_STORE_UNAVAILABLE
    Lua runtime error (ResponseError)   -> ADMISSION_PROCEDURE_FAULT
    Wrong argument count                -> ADMISSION_PROCEDURE_FAULT (not sent)
    Reply of the wrong shape            -> ADMISSION_PROCEDURE_FAULT

A NOSCRIPT reply means the server's script cache was flushed and the script
never ran. The executor reloads it and dispatches once more; no write is ever
repeated.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass
from functools import partial
from pathlib import Path
from typing import Any

from redis.exceptions import (
    ConnectionError as RedisConnectionError,
    NoScriptError,
    RedisError,
    ResponseError,
    TimeoutError as RedisTimeoutError,
)

from gatekeeper.core.enums import ErrorCode
from gatekeeper.core.result import Failure, Result, Success
from gatekeeper.domain.errors import AdmissionError
from gatekeeper.domain.protocols.logger_protocol import LoggerProtocol
from gatekeeper.infrastructure.enums import InfrastructureErrorCode
from gatekeeper.infrastructure.errors import ExecutionError

type ScriptArg = str | int | float


@dataclass(frozen=True, slots=True, kw_only=True)
class AtomicProcedure:
    """A named Lua script with a fixed arity.

    Attributes:
        name: Procedure name used in logs and SHA cache.
        script: File name under ``lua_scripts/``.
        key_count: Number of KEYS the script expects.
        arg_count: Number of ARGV values the script expects.
        reply_arity: Number of items in the reply table.
        source: Inline Lua source; when set, ``script`` is not read.
    """

    name: str
    script: str
    key_count: int
    arg_count: int
    reply_arity: int
    source: str | None = None


class ProcedureExecutor:
    """Runs AtomicProcedures against one Redis client.

    Args:
        redis_client: An async Redis client (redis.asyncio.Redis compatible).
        logger: Structured logger.

    Attributes:
        redis: The Redis client instance.
        _shas: Cached script SHAs by procedure name.
    """

    def __init__(self, *, redis_client: Any, logger: LoggerProtocol) -> None:
        self.redis = redis_client
        self._shas: dict[str, str] = {}
        self._script_lock = asyncio.Lock()
        self._logger = logger

    # ---------------------------------------------------------------------
    # Public API
    # ---------------------------------------------------------------------
    async def execute(
        self,
        procedure: AtomicProcedure,
        keys: Sequence[str],
        args: Sequence[ScriptArg],
    ) -> Result[tuple[Any, ...], ExecutionError]:
        """Run a procedure atomically and return its decoded reply.

        Args:
            procedure: Procedure to run.
            keys: Exactly ``procedure.key_count`` keys.
            args: Exactly ``procedure.arg_count`` scalar arguments.

        Returns:
            Result with a tuple of ``reply_arity`` items (UTF-8 bytes decoded to
            str, other bytes left as bytes),
            or Failure(ExecutionError).
        """
        if len(keys) != procedure.key_count or len(args) != procedure.arg_count:
            return self._fail(
                procedure,
                code=ErrorCode.ADMISSION_PROCEDURE_FAULT,
                infrastructure_code=InfrastructureErrorCode.PROCEDURE_ARITY_MISMATCH,
                message=(
                    f"Procedure '{procedure.name}' expects {procedure.key_count} keys "
                    f"and {procedure.arg_count} args, got {len(keys)} and {len(args)}"
                ),
                details={"keys": len(keys), "args": len(args)},
            )

        try:
            reply = await self._dispatch(procedure, keys, args)
        except (RedisConnectionError, RedisTimeoutError, TimeoutError) as exc:
            return self._fail(
                procedure,
                code=ErrorCode.ADMISSION_STORE_UNAVAILABLE,
                infrastructure_code=_unavailable_code(exc),
                message=f"Store unavailable while running '{procedure.name}'",
                cause=exc,
            )
        except ResponseError as exc:
            return self._fail(
                procedure,
                code=ErrorCode.ADMISSION_PROCEDURE_FAULT,
                infrastructure_code=InfrastructureErrorCode.PROCEDURE_RUNTIME_ERROR,
                message=f"Procedure '{procedure.name}' failed: {exc}",
                cause=exc,
            )
        except RedisError as exc:
            return self._fail(
                procedure,
                code=ErrorCode.ADMISSION_STORE_UNAVAILABLE,
                infrastructure_code=InfrastructureErrorCode.STORE_CONNECTION_FAILED,
                message=f"Store error while running '{procedure.name}'",
                cause=exc,
            )

        if not isinstance(reply, (list, tuple)) or len(reply) != procedure.reply_arity:
            return self._fail(
                procedure,
                code=ErrorCode.ADMISSION_PROCEDURE_FAULT,
                infrastructure_code=InfrastructureErrorCode.PROCEDURE_REPLY_INVALID,
                message=(
                    f"Procedure '{procedure.name}' returned an unexpected reply "
                    f"(expected {procedure.reply_arity} items)"
                ),
                details={"reply": repr(reply)},
            )

        return Success(value=tuple(_decode(item) for item in reply))

    async def delete(
        self,
        keys: Sequence[str],
        *,
        match: str | None = None,
    ) -> Result[int, ExecutionError]:
        """Delete keys (plus any matching a SCAN pattern).

        Not atomic across the scan. Used for administrative clears only.

        Returns:
            Result with the number of keys removed.
        """
        try:
            targets = list(keys)
            if match is not None:
                async for key in self.redis.scan_iter(match=match, count=100):
                    targets.append(_decode(key))
            if not targets:
                return Success(value=0)
            removed = await self.redis.delete(*targets)
        except (RedisConnectionError, RedisTimeoutError, TimeoutError) as exc:
            return self._fail(
                None,
                code=ErrorCode.ADMISSION_STORE_UNAVAILABLE,
                infrastructure_code=_unavailable_code(exc),
                message="Store unavailable while deleting records",
                cause=exc,
            )
        except RedisError as exc:
            return self._fail(
                None,
                code=ErrorCode.ADMISSION_PROCEDURE_FAULT,
                infrastructure_code=InfrastructureErrorCode.PROCEDURE_RUNTIME_ERROR,
                message=f"Failed to delete records: {exc}",
                cause=exc,
            )
        return Success(value=int(removed))

    def invalidate(self) -> None:
        """Forget cached SHAs (next call reloads every script)."""
        self._shas.clear()

    # ---------------------------------------------------------------------
    # Internal helpers
    # ---------------------------------------------------------------------
    async def _dispatch(
        self,
        procedure: AtomicProcedure,
        keys: Sequence[str],
        args: Sequence[ScriptArg],
    ) -> Any:
        sha = await self._ensure_script(procedure)
        try:
            return await self.redis.evalsha(sha, procedure.key_count, *keys, *args)
        except ResponseError as exc:
            if not _is_noscript(exc):
                raise
            self._logger.warning(
                "procedure_script_missing",
                procedure=procedure.name,
                sha=sha,
            )
            if self._shas.get(procedure.name) == sha:
                del self._shas[procedure.name]
            sha = await self._ensure_script(procedure)
            return await self.redis.evalsha(sha, procedure.key_count, *keys, *args)

    async def _ensure_script(self, procedure: AtomicProcedure) -> str:
        """Load the procedure's Lua script into Redis and cache the SHA.

        Returns:
            str: Script SHA.
        """
        sha = self._shas.get(procedure.name)
        if sha:
            return sha
        async with self._script_lock:
            sha = self._shas.get(procedure.name)
            if sha:
                return sha
            source = procedure.source
            if source is None:
                source = await _read_lua_script(procedure.script)
            loaded = await self.redis.script_load(source)
            sha = _decode(loaded)
            self._shas[procedure.name] = sha
            self._logger.debug("procedure_loaded", procedure=procedure.name, sha=sha)
            return sha

    def _fail(
        self,
        procedure: AtomicProcedure | None,
        *,
        code: ErrorCode,
        infrastructure_code: InfrastructureErrorCode,
        message: str,
        cause: Exception | None = None,
        details: dict[str, Any] | None = None,
    ) -> Failure[ExecutionError]:
        name = procedure.name if procedure is not None else "delete"
        info: dict[str, Any] = dict(details or {})
        if cause is not None:
            info["error_type"] = type(cause).__name__
            info["error_message"] = str(cause)
        self._logger.error(
            "procedure_failed",
            error=cause,
            procedure=name,
            error_code=code.value,
            infrastructure_code=infrastructure_code.value,
        )
        return Failure(
            error=ExecutionError(
                code=code,
                message=message,
                procedure=name,
                infrastructure_code=infrastructure_code,
                details=info,
            )
        )


def to_admission_error(error: ExecutionError, identifier: str) -> AdmissionError:
    """Map an executor failure to the domain error, keeping code and cause."""
    details: dict[str, Any] = {"procedure": error.procedure, **(error.details or {})}
    if error.infrastructure_code is not None:
        details["infrastructure_code"] = error.infrastructure_code.value
    return AdmissionError(
        code=error.code,
        message=error.message,
        identifier=identifier,
        details=details,
    )


def invalid_reply(
    procedure: AtomicProcedure,
    identifier: str,
    reply: tuple[Any, ...],
    cause: Exception,
) -> AdmissionError:
    """Domain error for a reply whose items do not have the expected types."""
    return AdmissionError(
        code=ErrorCode.ADMISSION_PROCEDURE_FAULT,
        message=f"Procedure '{procedure.name}' returned values of the wrong type",
        identifier=identifier,
        details={
            "procedure": procedure.name,
            "infrastructure_code": InfrastructureErrorCode.PROCEDURE_REPLY_INVALID.value,
            "reply": repr(reply),
            "error_message": str(cause),
        },
    )


def _is_noscript(exc: ResponseError) -> bool:
    return isinstance(exc, NoScriptError) or str(exc).startswith("NOSCRIPT")


def _decode(value: Any) -> Any:
    """Decode UTF-8 bytes; bytes that are not valid UTF-8 are returned as is."""
    if isinstance(value, bytes):
        try:
            return value.decode("utf-8")
        except UnicodeDecodeError:
            return value
    return value


def _unavailable_code(exc: Exception) -> InfrastructureErrorCode:
    if isinstance(exc, (RedisTimeoutError, TimeoutError)):
        return InfrastructureErrorCode.STORE_TIMEOUT
    return InfrastructureErrorCode.STORE_CONNECTION_FAILED


def _read_lua_script_sync(path: Path) -> str:
    """Synchronous helper to read Lua script (called via run_in_executor)."""
    return path.read_text(encoding="utf-8")


async def _read_lua_script(file_name: str) -> str:
    """Read a Lua script from ``lua_scripts/`` without blocking the loop."""
    full_path = Path(__file__).parent / "lua_scripts" / file_name
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, partial(_read_lua_script_sync, full_path))
