"""
Menagerie Backend: Animal API Routes
=====================================

What:  POST/GET /animals and GET/PUT/DELETE /animals/{id}.
How:   One call to the generic resource router with the animal controller.
"""

from menagerie.dependencies import get_animal_controller
from menagerie.routes.resources import build_resource_router

router = build_resource_router(
    "/animals",
    get_animal_controller,
    resource_name="animal",
    tags=["Animals"],
)
