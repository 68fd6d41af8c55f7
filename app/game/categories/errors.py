class CategoryError(Exception):
    pass


class CategoryNotFoundError(CategoryError):
    pass


class CategoryUnauthorizedError(CategoryError):
    pass


class CategoryInvalidInputError(CategoryError):
    pass


class CategoryStorageError(CategoryError):
    pass
