"""
Menagerie Backend: FastAPI Dependencies
========================================

What:  Builds the per-request collaborators from the app-wide Database.
Why:   The engine is created once (lifespan or test fixture) and stored on
       `app.state`; handlers never import it as a module global.
How:   get_database → get_animal_gateway → get_animal_controller. Gateways
       and controllers are stateless, so building them per request is cheap.
"""

from fastapi import Depends, Request

from menagerie.controllers.resource import ResourceController
from menagerie.database import Database
from menagerie.schemas.animal import AnimalCreate
from menagerie.storage.animals import AnimalGateway, build_animal_gateway


def get_database(request: Request) -> Database:
    database = getattr(request.app.state, "database", None)
    if database is None:
        raise RuntimeError("Database is not initialized. It is created in the app lifespan.")
    return database


def get_animal_gateway(database: Database = Depends(get_database)) -> AnimalGateway:
    return build_animal_gateway(
        database.engine, statement_timeout=database.settings.db_statement_timeout
    )


def get_animal_controller(
    gateway: AnimalGateway = Depends(get_animal_gateway),
) -> ResourceController:
    return ResourceController(gateway, AnimalCreate, resource_name="animal")
