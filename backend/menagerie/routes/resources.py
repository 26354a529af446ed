"""
Menagerie Backend: Generic Resource Router
===========================================

What:  Binds a collection path and an item path to a ResourceController.
Why:   Routes stay thin; the CRUD protocol lives in the controller.
How:   Handlers read the raw body and the raw `{resource_id}` segment and pass
       them straight to `ResourceController.dispatch`. Parsing happens in the
       controller, so malformed input is a 400 (FastAPI would answer 422).

Route Table (for prefix "/animals"):
    POST   /animals                 create
    GET    /animals                 list
    GET    /animals/{resource_id}   get
    PUT    /animals/{resource_id}   update
    DELETE /animals/{resource_id}   delete
"""

import logging
from functools import partial
from typing import Callable, List, Optional

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse

from menagerie.controllers.resource import ControllerResponse, ResourceController
from menagerie.middleware.request_id import request_id_var
from menagerie.routes.disconnect import ClientDisconnected, cancel_on_disconnect
from menagerie.schemas.animal import ErrorResponse

logger = logging.getLogger(__name__)

# Nginx's "client closed request"; nobody reads it, but access logs stay truthful
CLIENT_CLOSED_REQUEST = 499

_BODY_METHODS = {"POST", "PUT"}


def to_http_response(result: ControllerResponse) -> Response:
    """Render a ControllerResponse, tagging error bodies with the request ID."""
    if result.body is None:
        return Response(status_code=result.status_code)
    content = result.body
    if result.status_code >= 400 and isinstance(content, dict):
        content = {**content, "request_id": request_id_var.get("")}
    return JSONResponse(status_code=result.status_code, content=content)


async def _handle(
    request: Request, controller: ResourceController, resource_id: Optional[str]
) -> Response:
    body = await request.body() if request.method in _BODY_METHODS else b""
    poll_interval = request.app.state.settings.disconnect_poll_interval
    try:
        result = await cancel_on_disconnect(
            request,
            partial(controller.dispatch, request.method, resource_id, body),
            poll_interval=poll_interval,
        )
    except ClientDisconnected:
        logger.info(
            "Client disconnected during %s %s; operation cancelled",
            request.method, request.url.path,
        )
        return Response(status_code=CLIENT_CLOSED_REQUEST)
    return to_http_response(result)


def build_resource_router(
    prefix: str,
    get_controller: Callable[..., ResourceController],
    resource_name: str,
    tags: Optional[List[str]] = None,
) -> APIRouter:
    """
    Create an APIRouter exposing the five CRUD operations under `prefix`.

    `get_controller` is a FastAPI dependency returning the resource's controller.
    """
    router = APIRouter(tags=tags or [resource_name.capitalize()])
    item_path = prefix + "/{resource_id}"
    errors = {
        400: {"description": "Malformed body or identifier", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    }
    not_found = {404: {"description": f"No such {resource_name}", "model": ErrorResponse}}

    async def collection_endpoint(
        request: Request, controller: ResourceController = Depends(get_controller)
    ) -> Response:
        return await _handle(request, controller, None)

    async def item_endpoint(
        resource_id: str,
        request: Request,
        controller: ResourceController = Depends(get_controller),
    ) -> Response:
        return await _handle(request, controller, resource_id)

    router.add_api_route(
        prefix, collection_endpoint, methods=["POST"], status_code=201,
        summary=f"Create a {resource_name}",
        responses={**errors, 409: {"description": "Conflict", "model": ErrorResponse}},
    )
    router.add_api_route(
        prefix, collection_endpoint, methods=["GET"],
        summary=f"List every {resource_name}",
        responses={500: errors[500]},
    )
    router.add_api_route(
        item_path, item_endpoint, methods=["GET"],
        summary=f"Get one {resource_name}",
        responses={**errors, **not_found},
    )
    router.add_api_route(
        item_path, item_endpoint, methods=["PUT"],
        summary=f"Replace one {resource_name}",
        responses={**errors, **not_found},
    )
    router.add_api_route(
        item_path, item_endpoint, methods=["DELETE"], status_code=204,
        summary=f"Delete one {resource_name}",
        responses={**errors, **not_found},
    )
    return router
