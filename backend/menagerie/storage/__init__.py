"""
Storage layer: parameterized SQL against the relational store.

    gateway.py  generic one-table gateway and the error classifier
    animals.py  the `animals` table binding
"""

from menagerie.storage.animals import AnimalGateway, build_animal_gateway
from menagerie.storage.gateway import TableGateway, classify_error

__all__ = ["AnimalGateway", "TableGateway", "build_animal_gateway", "classify_error"]
