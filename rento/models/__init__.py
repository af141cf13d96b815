# Rento Database Models
# Import all models here for SQLAlchemy discovery

from rento.models.vehicle import Vehicle                                    # noqa
from rento.models.availability_override import CustomAvailabilityOverride   # noqa
from rento.models.booking import Booking, BookingStatus                     # noqa
