"""
Animal binding of the generic table gateway.

The API lists animals in identifier order; the HTML index lists them by
weight, lightest first, with the identifier as a tie-breaker so the page is
stable between reloads.
"""

from sqlalchemy.ext.asyncio import AsyncEngine

from menagerie.models.animal import Animal
from menagerie.schemas.animal import AnimalCreate, AnimalRead
from menagerie.storage.gateway import TableGateway

AnimalGateway = TableGateway[AnimalRead, AnimalCreate]

API_ORDER = (Animal.id,)
VIEW_ORDER = (Animal.weight, Animal.id)


def build_animal_gateway(engine: AsyncEngine, statement_timeout: float = 30.0) -> AnimalGateway:
    return TableGateway(
        engine,
        Animal,
        AnimalRead,
        statement_timeout=statement_timeout,
        default_order=API_ORDER,
    )
