from menagerie.controllers.resource import ControllerResponse, ResourceController, ResourceGateway

__all__ = ["ControllerResponse", "ResourceController", "ResourceGateway"]
