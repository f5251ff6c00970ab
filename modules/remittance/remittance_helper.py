from datetime import datetime, timedelta
from decimal import Decimal

from sqlalchemy import func

# models
from models import Remittance


FRIDAY = 4


def get_next_friday(date: datetime) -> datetime:
    """Same day when date is a Friday, otherwise the coming Friday. Time is dropped."""
    day = date.replace(hour=0, minute=0, second=0, microsecond=0)
    return day + timedelta(days=(FRIDAY - day.weekday()) % 7)


def format_remittance_date(date: datetime) -> str:
    return date.strftime("%d%m%Y")


def generate_remittance_number(db, client_code: str, date: datetime) -> str:
    """R{client_code}{DDMMYYYY}/{serial}, e.g. RSS0012314022026/01"""
    prefix = "R{}{}".format(client_code, format_remittance_date(date))

    existing = (
        db.query(func.count(Remittance.id))
        .filter(Remittance.remittance_number.startswith(prefix + "/", autoescape=True))
        .scalar()
    )

    return "{}/{:02d}".format(prefix, (existing or 0) + 1)


def validate_awb_for_remittance(order, remitted_awbs=None, awb_to_remittance=None):
    """
    (True, None) when the order can go into a remittance,
    (False, reason) otherwise.
    """
    if order is None:
        return False, "AWB not found in system"

    if order.status != "delivered":
        return False, 'Order status is "{}", must be "delivered"'.format(order.status)

    if (order.payment_mode or "").upper() != "COD":
        return False, 'Payment mode is "{}", must be "COD"'.format(order.payment_mode)

    cod_amount = Decimal(str(order.cod_amount or 0))
    if cod_amount <= 0:
        return False, "COD amount is {}, must be > 0".format(cod_amount)

    if order.cod_remitted:
        return False, "Already remitted (order marked as cod_remitted)"

    if remitted_awbs and order.awb_number in remitted_awbs:
        remittance_number = (awb_to_remittance or {}).get(order.awb_number, "unknown")
        return False, "Already in remittance {}".format(remittance_number)

    return True, None
