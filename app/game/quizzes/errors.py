class QuizError(Exception):
    pass


class QuizNotFoundError(QuizError):
    pass


class QuizUnauthorizedError(QuizError):
    pass


class QuizInvalidInputError(QuizError):
    pass


class QuizStorageError(QuizError):
    pass
