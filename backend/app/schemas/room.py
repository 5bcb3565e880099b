from pydantic import BaseModel, Field

from app.models.room import RoomType


class RoomBase(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    type: RoomType
    capacity: int = Field(ge=1, le=10000)
    department_id: str | None = Field(default=None, max_length=36)


class RoomCreate(RoomBase):
    pass


class RoomUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    type: RoomType | None = None
    capacity: int | None = Field(default=None, ge=1, le=10000)
    department_id: str | None = Field(default=None, max_length=36)


class RoomOut(RoomBase):
    id: str

    model_config = {"from_attributes": True}
