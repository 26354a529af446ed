"""
Menagerie Backend: Pydantic Request/Response Schemas
=====================================================

What:  Pydantic models defining the API contract.
Why:   Strict input validation and a stable output shape, independent of the
       table mapping in models/animal.py.
Who:   AnimalCreate is parsed by the Resource Controller; AnimalRead is what
       the storage gateway returns and what the API serializes.

Field order is part of the contract: AnimalRead always dumps
id, name, weight, diet in that order.
"""

import uuid
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

# Bounds of the `weight` column (PostgreSQL `integer`)
INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1


# ══════════════════════════════════════════════════════════════════════════
# Animal Models
# ══════════════════════════════════════════════════════════════════════════


class AnimalCreate(BaseModel):
    """
    What:  Creation and full-replacement payload (POST /animals, PUT /animals/{id}).
    How:   Strict mode: "500" is not a weight and 1 is not a name.

    There is no `id` field. An `id` key in the body is dropped by Pydantic's
    default extra="ignore", so a client can neither choose an identifier on
    create nor overwrite one on update.
    """

    model_config = ConfigDict(strict=True)

    name: str = Field(description="Display name of the animal")
    weight: int = Field(ge=INT32_MIN, le=INT32_MAX, description="Weight as a 32-bit integer")
    diet: str = Field(description="Free-form diet classification, e.g. 'carnivorous'")


class AnimalRead(BaseModel):
    """
    What:  Full representation of a stored animal.
    Who:   Returned by every API operation that yields a row.
    """

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID = Field(description="Unique animal identifier (UUID)")
    name: str
    weight: int
    diet: str


# ══════════════════════════════════════════════════════════════════════════
# Error & Health Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    What:  Standardized error body for all API errors.

    Fields:
        error: Machine-readable code (bad_request, not_found, conflict, server_error)
        message: Human-readable description; never contains driver or SQL text
        details: Field-level validation problems (400 only)
        request_id: Correlation ID for tracing this error in server logs
    """

    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[List[dict]] = Field(default=None, description="Field-level problems")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health for monitoring and load balancer checks."""

    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
