# Room-block allocator: Database Models
# Import all models here for SQLAlchemy discovery

from app.models.event import Event               # noqa
from app.models.guest import Guest               # noqa
from app.models.room_block import RoomBlock      # noqa
from app.models.activity_log import ActivityLog  # noqa
