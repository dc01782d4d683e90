from queuewise.models.user import User, UserProfile
from queuewise.models.clinic import Clinic
from queuewise.models.doctor import Doctor
from queuewise.models.nurse import Nurse
from queuewise.models.patient import Patient
from queuewise.models.booking_ticket import BookingTicket
from queuewise.models.queue_state import QueueState
from queuewise.models.queue_counter import QueueCounter
from queuewise.models.invite import Invite
from queuewise.models.platform import PlatformAdmin, PlatformClient
