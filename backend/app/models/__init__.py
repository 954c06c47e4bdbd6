from app.models.activity_log import ActivityLog  # noqa: F401
from app.models.booking import Booking, BookingStatus  # noqa: F401
from app.models.classroom import Classroom, ClassroomStatus, RoomType  # noqa: F401
from app.models.time_slot import DayOfWeek, SlotType, TimeSlot  # noqa: F401
