from .common import ErrorDetail, ErrorResponse, Pagination, HealthCheck
from .items import ItemCreate, Item, ItemWithAvailability, ItemResponse, ItemAvailabilityResponse
from .reservations import ReservationCreate, Reservation, ReservationResponse, ReservationListResponse, ExpireResult, ExpireResponse
from .logs import OperationLogEntry, OperationLogListResponse
