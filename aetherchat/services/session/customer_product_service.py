# aetherchat/services/session/customer_product_service.py
"""Assigning session packages to customers and editing them"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from aetherchat.core.exceptions import CustomerNotFound, CustomerProductNotFound, ProductNotFound
from aetherchat.models.appointment import Appointment
from aetherchat.models.customer import Customer
from aetherchat.models.customer_product import CustomerProduct
from aetherchat.models.product import Product
from aetherchat.services.notification.notifier import Notifier
from aetherchat.services.reminder.reminder_service import ReminderService
from aetherchat.services.session.session_ledger import (
    compute_expiry_date,
    recompute_remaining_sessions,
    set_total_sessions,
    set_used_sessions,
)
from aetherchat.utils.datetime_utils import utcnow

logger = logging.getLogger(__name__)


class CustomerProductService:
    """Invoices: session packages owned by customers"""

    @staticmethod
    def get_customer_product(db: Session, customer_product_id) -> CustomerProduct:
        customer_product = db.query(CustomerProduct).filter(CustomerProduct.id == customer_product_id).first()
        if not customer_product:
            raise CustomerProductNotFound(f"Customer product {customer_product_id} not found")
        return customer_product

    @staticmethod
    def assign_product(
            db: Session,
            customer_id,
            product_id,
            staff_id=None,
            total_sessions: Optional[int] = None,
            expiry_days: Optional[int] = None,
            notes: Optional[str] = None,
            assigned_date: Optional[datetime] = None,
            notifier: Optional[Notifier] = None
    ) -> CustomerProduct:
        """
        Create a package for the customer. Session count defaults to the
        product's default_sessions (or 1), expiry to the product's expiry_days.
        """
        customer = db.query(Customer).filter(Customer.id == customer_id).first()
        if not customer:
            raise CustomerNotFound(f"Customer {customer_id} not found")

        product = db.query(Product).filter(Product.id == product_id).first()
        if not product:
            raise ProductNotFound(f"Product {product_id} not found")

        assigned_date = assigned_date or utcnow()
        expiry_days = expiry_days or product.expiry_days

        customer_product = CustomerProduct(
            customer_id=customer.id,
            product_id=product.id,
            staff_id=staff_id,
            product_name=product.name,
            assigned_date=assigned_date,
            expiry_days=expiry_days,
            expiry_date=compute_expiry_date(assigned_date, expiry_days),
            is_active=True,
            notes=notes,
        )
        customer_product.product = product
        customer_product.used_sessions = 0
        set_total_sessions(customer_product, total_sessions or product.default_sessions or 1)

        db.add(customer_product)
        db.flush()
        ReminderService.schedule_expiry_reminders(db, customer_product)
        db.commit()
        db.refresh(customer_product)

        logger.info(
            f"Assigned {product.name} to customer {customer.id}: "
            f"{customer_product.total_sessions} sessions, expires {customer_product.expiry_date}"
        )
        if notifier:
            notifier.notify("customer_product:created", customer_product.to_dict())
        return customer_product

    @staticmethod
    def update_customer_product(
            db: Session,
            customer_product_id,
            updates: Dict[str, Any],
            notifier: Optional[Notifier] = None
    ) -> CustomerProduct:
        customer_product = CustomerProductService.get_customer_product(db, customer_product_id)

        if "total_sessions" in updates:
            set_total_sessions(customer_product, updates["total_sessions"])
        if "used_sessions" in updates:
            set_used_sessions(customer_product, updates["used_sessions"])

        expiry_changed = False
        if "expiry_days" in updates and updates["expiry_days"] != customer_product.expiry_days:
            customer_product.expiry_days = updates["expiry_days"]
            if "expiry_date" not in updates:
                customer_product.expiry_date = compute_expiry_date(
                    customer_product.assigned_date, customer_product.expiry_days
                )
            expiry_changed = True
        if "expiry_date" in updates:
            customer_product.expiry_date = updates["expiry_date"]
            expiry_changed = True

        for key in ("is_active", "notes"):
            if key in updates:
                setattr(customer_product, key, updates[key])

        recompute_remaining_sessions(customer_product)

        if expiry_changed:
            ReminderService.cancel_expiry_reminders(db, customer_product.id, "Expiry date changed")
            db.flush()
            ReminderService.schedule_expiry_reminders(db, customer_product)

        db.commit()
        db.refresh(customer_product)

        if notifier:
            notifier.notify("customer_product:updated", customer_product.to_dict())
        return customer_product

    @staticmethod
    def delete_customer_product(db: Session, customer_product_id, notifier: Optional[Notifier] = None) -> None:
        """Remove a package; its appointments stay, unlinked"""
        customer_product = CustomerProductService.get_customer_product(db, customer_product_id)

        ReminderService.cancel_expiry_reminders(db, customer_product.id)
        db.query(Appointment).filter(
            Appointment.customer_product_id == customer_product.id
        ).update({"customer_product_id": None}, synchronize_session="fetch")

        db.delete(customer_product)
        db.commit()
        logger.info(f"Deleted customer product {customer_product_id}")

        if notifier:
            notifier.notify("customer_product:deleted", {"id": str(customer_product_id)})

    @staticmethod
    def list_customer_products(
            db: Session,
            customer_id=None,
            active_only: bool = False
    ) -> List[CustomerProduct]:
        query = db.query(CustomerProduct)
        if customer_id:
            query = query.filter(CustomerProduct.customer_id == customer_id)
        if active_only:
            query = query.filter(CustomerProduct.is_active == True)
        return query.order_by(CustomerProduct.assigned_date.desc()).all()
