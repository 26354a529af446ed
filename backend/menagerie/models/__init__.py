from menagerie.models.animal import Animal

__all__ = ["Animal"]
