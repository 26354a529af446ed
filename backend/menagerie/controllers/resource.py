"""
Menagerie Backend: Generic Resource Controller
===============================================

What:  Translates (HTTP method, optional identifier, optional JSON body) into a
       storage gateway call, and the call's outcome into (status, body).
Why:   One implementation of the CRUD protocol for any table-backed resource;
       the animal API is just one instance of it.
How:   Parses input with the resource's create schema and identifier parser,
       calls the gateway, and maps the closed outcome set onto status codes.
Who:   Called by the generic router in routes/resources.py.

Status Mapping:
    Operation   Success          Absent   Bad input   Conflict   Storage failure
    create      201 + row        -        400         409        500
    list        200 + [rows]     -        -           -          500
    get         200 + row        404      400         -          500
    update      200 + row        404      400         409        500
    delete      204 (empty)      404      400         -          500

    No other status codes are produced. Any unexpected exception becomes a
    500 with a generic body; the traceback goes to the log only.

The controller is stateless and knows nothing about Starlette or FastAPI, so
it can be exercised directly with bytes and strings.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, Protocol, Sequence, Type, TypeVar

from pydantic import BaseModel, ValidationError

from menagerie.exceptions import (
    BadRequestError,
    ConflictError,
    MenagerieError,
    NotFoundError,
    StorageError,
)

logger = logging.getLogger(__name__)

ReadT = TypeVar("ReadT", bound=BaseModel)
CreateT = TypeVar("CreateT", bound=BaseModel)
IdT = TypeVar("IdT")

GENERIC_SERVER_ERROR = "An internal error occurred. Please try again later."


class ResourceGateway(Protocol[ReadT, CreateT, IdT]):
    """The five storage operations a resource must provide."""

    async def create(self, payload: CreateT) -> ReadT: ...

    async def list(self) -> Sequence[ReadT]: ...

    async def get(self, resource_id: IdT) -> Optional[ReadT]: ...

    async def update(self, resource_id: IdT, payload: CreateT) -> Optional[ReadT]: ...

    async def delete(self, resource_id: IdT) -> Optional[bool]: ...


@dataclass(frozen=True)
class ControllerResponse:
    """Protocol-neutral response: `body=None` means no body at all."""

    status_code: int
    body: Any = None


class ResourceController(Generic[ReadT, CreateT, IdT]):
    """
    CRUD protocol for one resource.

    Args:
        gateway:        storage operations for the resource
        create_schema:  Pydantic model for creation/replacement bodies
        resource_name:  used in "not found" messages and logs
        parse_id:       turns the raw path segment into an identifier;
                        must raise ValueError on malformed input
    """

    def __init__(
        self,
        gateway: ResourceGateway[ReadT, CreateT, IdT],
        create_schema: Type[CreateT],
        resource_name: str,
        parse_id: Callable[[str], IdT] = uuid.UUID,
    ):
        self.gateway = gateway
        self.create_schema = create_schema
        self.resource_name = resource_name
        self.parse_id = parse_id

    # ── Entry Point ───────────────────────────────────────────────────────

    async def dispatch(
        self, method: str, raw_id: Optional[str] = None, body: bytes = b""
    ) -> ControllerResponse:
        """
        Route a verb and an optional identifier to one of the five operations.

        Only the combinations bound by the router are meaningful; anything
        else is a programming error and raises ValueError.
        """
        method = method.upper()
        if raw_id is None:
            if method == "POST":
                return await self.create(body)
            if method == "GET":
                return await self.list()
        else:
            if method == "GET":
                return await self.get(raw_id)
            if method == "PUT":
                return await self.update(raw_id, body)
            if method == "DELETE":
                return await self.delete(raw_id)
        raise ValueError(f"Unsupported operation: {method} with id={raw_id is not None}")

    # ── Operations ────────────────────────────────────────────────────────

    async def create(self, body: bytes) -> ControllerResponse:
        async def operation() -> ControllerResponse:
            payload = self._parse_body(body)
            row = await self.gateway.create(payload)
            return ControllerResponse(201, self._dump(row))

        return await self._handle("create", operation)

    async def list(self) -> ControllerResponse:
        async def operation() -> ControllerResponse:
            rows = await self.gateway.list()
            return ControllerResponse(200, [self._dump(row) for row in rows])

        return await self._handle("list", operation)

    async def get(self, raw_id: str) -> ControllerResponse:
        async def operation() -> ControllerResponse:
            resource_id = self._parse_id(raw_id)
            row = await self.gateway.get(resource_id)
            if row is None:
                raise NotFoundError(resource=self.resource_name, resource_id=str(resource_id))
            return ControllerResponse(200, self._dump(row))

        return await self._handle("get", operation)

    async def update(self, raw_id: str, body: bytes) -> ControllerResponse:
        async def operation() -> ControllerResponse:
            # The path identifier is authoritative; the body never carries one
            resource_id = self._parse_id(raw_id)
            payload = self._parse_body(body)
            row = await self.gateway.update(resource_id, payload)
            if row is None:
                raise NotFoundError(resource=self.resource_name, resource_id=str(resource_id))
            return ControllerResponse(200, self._dump(row))

        return await self._handle("update", operation)

    async def delete(self, raw_id: str) -> ControllerResponse:
        async def operation() -> ControllerResponse:
            resource_id = self._parse_id(raw_id)
            removed = await self.gateway.delete(resource_id)
            if removed is None:
                raise NotFoundError(resource=self.resource_name, resource_id=str(resource_id))
            return ControllerResponse(204)

        return await self._handle("delete", operation)

    # ── Parsing ───────────────────────────────────────────────────────────

    def _parse_id(self, raw_id: str) -> IdT:
        try:
            return self.parse_id(raw_id)
        except (TypeError, ValueError):
            raise BadRequestError(
                message=f"'{raw_id}' is not a valid {self.resource_name} identifier",
                context={"raw_id": raw_id},
            )

    def _parse_body(self, body: bytes) -> CreateT:
        try:
            return self.create_schema.model_validate_json(body or b"")
        except ValidationError as e:
            details = [
                {
                    "field": ".".join(str(part) for part in err["loc"]) or "body",
                    "message": err["msg"],
                }
                for err in e.errors(include_url=False, include_input=False)
            ]
            raise BadRequestError(message="Invalid request body", details=details)

    @staticmethod
    def _dump(row: BaseModel) -> dict:
        return row.model_dump(mode="json")

    # ── Outcome Translation ───────────────────────────────────────────────

    async def _handle(
        self, operation: str, call: Callable[[], Any]
    ) -> ControllerResponse:
        """
        Run one operation and translate whatever it raises.

        Conflicts and client errors carry their own message; every other
        storage failure and any unexpected exception gets the generic one.
        """
        try:
            return await call()
        except (BadRequestError, NotFoundError, ConflictError) as exc:
            logger.info(
                "%s %s rejected (%d): %s",
                self.resource_name, operation, exc.status_code, exc.message,
            )
            return self._error(exc.status_code, exc.error_code, exc.message,
                               getattr(exc, "details", None))
        except StorageError as exc:
            logger.error(
                "%s %s failed in storage (%s): %s",
                self.resource_name, operation, type(exc).__name__, exc.context,
            )
            return self._error(500, exc.error_code, GENERIC_SERVER_ERROR)
        except MenagerieError as exc:
            logger.error("%s %s failed: %s", self.resource_name, operation, exc.context)
            return self._error(500, "server_error", GENERIC_SERVER_ERROR)
        except Exception:
            logger.exception("Unexpected error during %s %s", self.resource_name, operation)
            return self._error(500, "server_error", GENERIC_SERVER_ERROR)

    @staticmethod
    def _error(
        status_code: int, code: str, message: str, details: Optional[list] = None
    ) -> ControllerResponse:
        body = {"error": code, "message": message}
        if details:
            body["details"] = details
        return ControllerResponse(status_code, body)
