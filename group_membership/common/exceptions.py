from typing import Any


class InternalException(Exception):
    """
    All internal exceptions should inherit from this
    """

    default_detail = 'Internal failure.'
    default_code = 'internal_failure'

    def __init__(self, message: str | None = None, context: dict[Any, Any] | Any = None):
        self.message = message or self.default_detail
        self.context = context or dict()
        super().__init__(self.message)

    def __str__(self) -> str:
        return f'{self.__class__.__name__}({self.message})'


class InvalidArgument(InternalException, ValueError):
    """
    Caller contract violation, surfaced immediately and never retried
    """

    default_detail = 'Invalid argument.'
    default_code = 'invalid_argument'
