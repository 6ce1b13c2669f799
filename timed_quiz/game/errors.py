class GameError(Exception):
    pass


class ValidationFailedError(GameError):
    pass


class AccessDeniedError(GameError):
    pass


class InvalidReferenceError(AccessDeniedError):
    pass


class StateConflictError(GameError):
    pass


class SessionClosedError(StateConflictError):
    pass


class AlreadyAnsweredError(StateConflictError):
    pass


class ConcurrentUpdateError(StateConflictError):
    pass


class DataIntegrityError(GameError):
    pass


class UnsupportedQuestionError(DataIntegrityError):
    pass


class NoQuestionAvailableError(DataIntegrityError):
    pass


class StoreUnavailableError(GameError):
    pass
