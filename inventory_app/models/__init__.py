from .items import Item
from .reservations import Reservation, ReservationStatus
from .logs import OperationLog, OperationType, OperationStatus
