from .control import ControlService, ValidationFailure

__all__ = ["ControlService", "ValidationFailure"]
