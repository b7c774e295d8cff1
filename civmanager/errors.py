"""Domain errors raised by the service layer.

Every error here is recoverable: routers translate them into HTTP responses
and the triggering action can be retried.
"""


class GameError(Exception):
    """Base class for all civilization-management errors."""


class InsufficientResource(GameError):
    def __init__(self, resource: str, requested: int, available: int):
        self.resource = resource
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient {resource}: need {requested}, have {available}"
        )

    def as_detail(self) -> dict:
        return {
            "message": str(self),
            "resource": self.resource,
            "requested": self.requested,
            "available": self.available,
        }


class InvalidOperation(GameError):
    pass


class AlreadyFounded(InvalidOperation):
    def __init__(self):
        super().__init__("Civilization already founded")


class InvalidTransition(InvalidOperation):
    def __init__(self, state, event: str):
        self.state = state
        self.event = event
        super().__init__(f"Cannot {event} from state '{state.value}'")


class ActionInProgress(InvalidOperation):
    def __init__(self, event: str):
        self.event = event
        super().__init__(f"Cannot {event}: another action is still in progress")


class NotEligible(GameError):
    def __init__(self, character_id: int, job_id: int):
        self.character_id = character_id
        self.job_id = job_id
        super().__init__(
            f"Character {character_id} does not meet the requirements for job {job_id}"
        )


class NotFound(GameError):
    def __init__(self, entity: str, key=None):
        self.entity = entity
        self.key = key
        message = f"{entity} not found" if key is None else f"{entity} {key} not found"
        super().__init__(message)


class TransientStoreFailure(GameError):
    pass


class AuthError(GameError):
    pass
