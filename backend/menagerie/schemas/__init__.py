from menagerie.schemas.animal import AnimalCreate, AnimalRead, ErrorResponse, HealthResponse

__all__ = ["AnimalCreate", "AnimalRead", "ErrorResponse", "HealthResponse"]
