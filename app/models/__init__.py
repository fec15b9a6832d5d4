# Fleet Booking Backend — Database Models
# Import all models here for SQLAlchemy discovery

from app.models.site import Site                       # noqa
from app.models.user_role import UserRole              # noqa
from app.models.profile import Profile                 # noqa
from app.models.vehicle import Vehicle                 # noqa
from app.models.booking_history import BookingHistory  # noqa
from app.models.alert import Alert                     # noqa
