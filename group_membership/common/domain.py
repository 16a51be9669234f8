from humps import camelize  # type: ignore[attr-defined]
from pydantic import BaseModel, ConfigDict

# Accepts both snake_case and camelCase input, records coming from the host
# application's API layer are usually camelCased
BaseDomainConfig = ConfigDict(
    extra='forbid',
    use_enum_values=True,
    from_attributes=True,
    alias_generator=camelize,
    populate_by_name=True,
)


class BaseDomain(BaseModel):
    model_config = BaseDomainConfig


class FrozenDomain(BaseDomain):
    """
    Hashable value object, safe to use as a dict key or set member
    """

    model_config = ConfigDict(**BaseDomainConfig, frozen=True)
