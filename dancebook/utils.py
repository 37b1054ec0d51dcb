# dancebook/utils.py

from collections import namedtuple
from datetime import date, datetime, timezone

from flask import g

from database import db
from dancebook.stores import BookingLedger, CatalogStore, CredentialStore
from dancebook.workflow import BookingWorkflow

Services = namedtuple('Services', ['users', 'catalog', 'ledger', 'workflow'])


def build_services(session):
    """Wires the stores and the booking workflow around one SQLAlchemy session."""
    users = CredentialStore(session)
    catalog = CatalogStore(session)
    ledger = BookingLedger(session)
    return Services(users, catalog, ledger, BookingWorkflow(catalog, ledger, users))


def get_services():
    """Services bound to the current request's session, built once per request."""
    if 'services' not in g:
        g.services = build_services(db.session)
    return g.services


def format_date(value, fmt='%d %b %Y'):
    if value is None:
        return ''
    if isinstance(value, (date, datetime)):
        return value.strftime(fmt)
    return datetime.fromisoformat(value).strftime(fmt)


def utc_to_local(utc_dt):
    """
    Convert a UTC datetime to the server's local time zone.
    Naive datetimes are assumed to be UTC.
    """
    if utc_dt is None:
        return None
    if utc_dt.tzinfo is None:
        utc_dt = utc_dt.replace(tzinfo=timezone.utc)
    return utc_dt.astimezone()


def register_template_filters(app):
    app.add_template_filter(format_date, 'format_date')
    app.add_template_filter(utc_to_local, 'utc_to_local')
