"""
Menagerie Backend: HTML Views
==============================

What:  Three server-rendered pages on top of the storage gateway.
How:   Jinja2 templates (autoescaped) rendered with FastAPI's Jinja2Templates.
       The pages' forms talk to the JSON API with fetch(); the views
       themselves only read.

Pages:
    GET /                      every animal, lightest first
    GET /animals/new           creation form
    GET /animals/{id}/edit     edit form with a delete button

This router must be included before the API router, otherwise
"/animals/new" would be taken for an item path with the identifier "new".
"""

from pathlib import Path
from uuid import UUID

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from menagerie.dependencies import get_animal_gateway
from menagerie.exceptions import BadRequestError, NotFoundError
from menagerie.storage.animals import VIEW_ORDER, AnimalGateway

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

router = APIRouter(tags=["Views"], include_in_schema=False)


@router.get("/", response_class=HTMLResponse)
async def index(request: Request, gateway: AnimalGateway = Depends(get_animal_gateway)):
    animals = await gateway.list(order_by=VIEW_ORDER)
    return templates.TemplateResponse(request, "index.html", {"animals": animals})


@router.get("/animals/new", response_class=HTMLResponse)
async def new_animal(request: Request):
    return templates.TemplateResponse(request, "new.html", {})


@router.get("/animals/{animal_id}/edit", response_class=HTMLResponse)
async def edit_animal(
    animal_id: str,
    request: Request,
    gateway: AnimalGateway = Depends(get_animal_gateway),
):
    try:
        parsed_id = UUID(animal_id)
    except ValueError:
        raise BadRequestError(message=f"'{animal_id}' is not a valid animal identifier")

    animal = await gateway.get(parsed_id)
    if animal is None:
        raise NotFoundError(resource="animal", resource_id=str(parsed_id))
    return templates.TemplateResponse(request, "edit.html", {"animal": animal})
