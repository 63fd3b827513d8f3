"""Protocol dispatcher shared by the HTTP and stdio transports.

Each request moves RECEIVED -> PARSED -> ROUTED -> COMPLETED. Any failure
along the way becomes an ``error`` envelope; nothing is raised to the
transport.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any

from pydantic import ValidationError

from dsgs.config import settings
from dsgs.constraint.generator import generate_constraints
from dsgs.constraint.template_store import TemplateStore
from dsgs.constraint.violations import NullViolationChecker, ViolationChecker
from dsgs.errors.exceptions import (
    DSGSError,
    GenerationError,
    InvalidParamsError,
    InvalidRequestError,
    LoadError,
    MethodNotFoundError,
    ParseError,
    SpecificationLoadError,
    TCCLoadError,
)
from dsgs.evolution.manager import STAGES
from dsgs.logging_config import bind_request_context, clear_request_context
from dsgs.models.enums import ErrorCode
from dsgs.models.envelope import (
    INVALID_REQUEST_ID,
    PARSE_ERROR_ID,
    SERVER_ERROR_ID,
    Request,
    Response,
)
from dsgs.models.tcc import TaskContextCapsule, utc_now_iso
from dsgs.specification.manager import SpecificationManager

logger = logging.getLogger(__name__)

_PROCESS_STARTED = time.monotonic()


def decode_envelope(body: str | bytes) -> Any:
    """Parse a request body.

    Raises:
        ParseError: If the body is not valid UTF-8 JSON.
    """
    try:
        return json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ParseError() from exc


def encode_envelope(response: dict[str, Any]) -> str:
    return json.dumps(response, separators=(",", ":"))


class Dispatcher:
    """Routes decoded envelopes to the three protocol methods."""

    def __init__(
        self,
        spec_manager: SpecificationManager | None = None,
        template_store: TemplateStore | None = None,
        violation_checker: ViolationChecker | None = None,
        version: str | None = None,
    ) -> None:
        self._specs = spec_manager or SpecificationManager()
        self._templates = template_store or TemplateStore()
        self._checker = violation_checker or NullViolationChecker()
        self._version = version or settings.server_version

    @property
    def methods(self) -> frozenset[str]:
        return frozenset(_HANDLERS)

    async def dispatch_raw(self, body: str | bytes) -> dict[str, Any]:
        """Decode *body* and dispatch it."""
        try:
            payload = decode_envelope(body)
        except ParseError as exc:
            logger.warning("Rejected malformed request body")
            return Response.failure(PARSE_ERROR_ID, exc.code, exc.message).to_dict()
        return await self.dispatch(payload)

    async def dispatch(self, payload: Any) -> dict[str, Any]:
        """Dispatch an already-decoded envelope and return the response envelope."""
        if not isinstance(payload, dict):
            exc = InvalidRequestError()
            return Response.failure(INVALID_REQUEST_ID, exc.code, exc.message).to_dict()

        request_id = payload.get("id")
        try:
            request = Request.model_validate(payload)
            bind_request_context(request.id, request.method if isinstance(request.method, str) else None)
            handler = _HANDLERS.get(request.method) if isinstance(request.method, str) else None
            if handler is None:
                raise MethodNotFoundError(request.method)
            result = await handler(self, request.params)
            return Response.success(request.id, result).to_dict()
        except DSGSError as exc:
            logger.info("Request failed with %d: %s", exc.code, exc.message)
            return Response.failure(request_id, exc.code, exc.message).to_dict()
        except Exception as exc:
            logger.exception("Unhandled error during dispatch")
            fallback_id = request_id if request_id is not None else SERVER_ERROR_ID
            return Response.failure(fallback_id, int(ErrorCode.INTERNAL_ERROR), str(exc) or "Internal error").to_dict()
        finally:
            clear_request_context()

    # --- Handlers ---

    async def _check_constraints(self, params: Any) -> dict[str, Any]:
        params = params if isinstance(params, dict) else {}
        tcc_path = params.get("tccPath")
        spec_path = params.get("specPath")
        if not _is_path(tcc_path) or not _is_path(spec_path):
            raise InvalidParamsError("Missing required parameters: tccPath and specPath")

        try:
            specification = await asyncio.to_thread(self._specs.load, spec_path)
        except LoadError as exc:
            raise SpecificationLoadError(exc) from exc
        logger.debug("Loaded specification %s", specification.get("name", spec_path))

        try:
            document = await asyncio.to_thread(self._specs.load, tcc_path)
            tcc = TaskContextCapsule.model_validate(document)
        except (LoadError, ValidationError) as exc:
            raise TCCLoadError(exc) from exc

        try:
            constraints = await asyncio.to_thread(generate_constraints, tcc, self._templates)
        except GenerationError:
            raise
        except Exception as exc:
            raise GenerationError(exc) from exc

        # Violation detection is delegated to the configured checker; the
        # default checker reports nothing.
        violations = self._checker.check(constraints, tcc)
        return {
            "constraints": [c.model_dump(mode="json", by_alias=True) for c in constraints],
            "violations": [v.model_dump(mode="json", by_alias=True) for v in violations],
            "timestamp": utc_now_iso(),
        }

    async def _get_system_status(self, params: Any) -> dict[str, Any]:
        return {
            "status": "running",
            "version": self._version,
            "uptime": time.monotonic() - _PROCESS_STARTED,
            "timestamp": utc_now_iso(),
        }

    async def _get_evolution_stage(self, params: Any) -> dict[str, Any]:
        stage = STAGES[0]
        return {
            "currentStage": stage.name,
            "description": stage.description,
            "capabilities": list(stage.features),
            "timestamp": utc_now_iso(),
        }


def _is_path(value: Any) -> bool:
    return isinstance(value, str) and bool(value)


Handler = Callable[[Dispatcher, Any], Awaitable[dict[str, Any]]]

_HANDLERS: dict[str, Handler] = {
    "checkConstraints": Dispatcher._check_constraints,
    "getSystemStatus": Dispatcher._get_system_status,
    "getEvolutionStage": Dispatcher._get_evolution_stage,
}
