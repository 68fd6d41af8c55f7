class GameError(Exception):
    pass


class GameNotFoundError(GameError):
    pass


class GameUnauthorizedError(GameError):
    pass


class GameInvalidInputError(GameError):
    pass


class GameNotStartedError(GameError):
    pass


class GameNotRunningError(GameError):
    pass


class GameStorageError(GameError):
    pass
