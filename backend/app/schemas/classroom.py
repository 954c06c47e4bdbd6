from pydantic import BaseModel, Field

from app.models.classroom import ClassroomStatus, RoomType


class ClassroomBase(BaseModel):
    room_number: str = Field(min_length=1, max_length=50)
    building: str = Field(min_length=1, max_length=200)
    capacity: int = Field(ge=1, le=1000)
    room_type: RoomType = RoomType.lecture
    status: ClassroomStatus = ClassroomStatus.available
    is_active: bool = True


class ClassroomCreate(ClassroomBase):
    pass


class ClassroomUpdate(BaseModel):
    room_number: str | None = Field(default=None, min_length=1, max_length=50)
    building: str | None = Field(default=None, min_length=1, max_length=200)
    capacity: int | None = Field(default=None, ge=1, le=1000)
    room_type: RoomType | None = None
    status: ClassroomStatus | None = None
    is_active: bool | None = None


class ClassroomOut(ClassroomBase):
    id: int

    model_config = {"from_attributes": True}
