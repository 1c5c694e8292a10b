from ticketing.services.event_service import EventService
from ticketing.services.order_service import OrderService
from ticketing.services.user_service import UserService

__all__ = ["EventService", "OrderService", "UserService"]
