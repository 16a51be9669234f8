import enum


class BaseEnum(str, enum.Enum):
    """
    String enum whose str() is the stored value, so members can be used
    directly in cache keys and store conditions
    """

    def __str__(self) -> str:
        return str(self.value)

    @classmethod
    def values(cls) -> tuple[str, ...]:
        return tuple(member.value for member in cls)
