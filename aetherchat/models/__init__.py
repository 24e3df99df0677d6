# aetherchat/models/__init__.py
from .base import Base
from .app_settings import AppSettings
from .branch import Branch
from .product import Product
from .user import User
from .customer import Customer
from .conversation import Conversation
from .message import Message
from .customer_product import CustomerProduct
from .appointment import Appointment
from .appointment_reminder import AppointmentReminder

__all__ = [
    "Base",
    "AppSettings",
    "Branch",
    "Product",
    "User",
    "Customer",
    "Conversation",
    "Message",
    "CustomerProduct",
    "Appointment",
    "AppointmentReminder",
]
