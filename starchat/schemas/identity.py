import enum

from pydantic import BaseModel, ConfigDict


class SenderType(str, enum.Enum):
    USER = "user"
    SUPERSTAR = "superstar"

    @property
    def counterpart(self) -> "SenderType":
        if self is SenderType.USER:
            return SenderType.SUPERSTAR
        return SenderType.USER


class Identity(BaseModel):
    """The resolved caller: which side of a conversation they act on, and their id.

    For ``SenderType.USER`` the id is a ``users.id``; for ``SenderType.SUPERSTAR``
    it is a ``superstars.id``. Instances are immutable and are passed into every
    service call instead of being looked up from ambient request state.
    """

    role: SenderType
    id: int

    model_config = ConfigDict(frozen=True)

    @classmethod
    def as_user(cls, user_id: int) -> "Identity":
        return cls(role=SenderType.USER, id=user_id)

    @classmethod
    def as_superstar(cls, superstar_id: int) -> "Identity":
        return cls(role=SenderType.SUPERSTAR, id=superstar_id)
