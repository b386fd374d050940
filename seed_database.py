#!/usr/bin/env python
"""
Seed database with sample clients and services.

This script writes a handful of clients and the services they have
engaged, then runs one reconciliation so the dashboard has compliance
items to show.
"""

import json
from datetime import date

from docket.engine import build_engine
from docket.models import Client, ClientStatus, Service, ServiceStatus

# Sample clients across two portfolios
SAMPLE_CLIENTS = [
    Client("c-acme", "Acme Trading Ltd", ref="ACME01", portfolio_code=1, registered_number="08123456"),
    Client("c-widget", "Widget Industries Ltd", ref="WIDG01", portfolio_code=1, registered_number="07234567"),
    Client("c-sunrise", "Sunrise Ventures Ltd", ref="SUNR01", portfolio_code=2, registered_number="13345678"),
    Client("c-legacy", "Legacy Systems Ltd", ref="LEGA01", portfolio_code=2, status=ClientStatus.ARCHIVED),
    Client("c-jones", "Dr A Jones", ref="JONE01", portfolio_code=2),
]

SAMPLE_SERVICES = [
    Service("s-acme-acc", "c-acme", "Annual Accounts"),
    Service("s-acme-ct", "c-acme", "Corporation Tax"),
    Service("s-acme-vat", "c-acme", "VAT Returns", next_due=date(2025, 8, 7)),
    Service("s-widget-cs", "c-widget", "Confirmation Statement"),
    Service("s-widget-pay", "c-widget", "Payroll"),
    Service("s-sunrise-mix", "c-sunrise", "Accounts & VAT"),
    Service("s-legacy-acc", "c-legacy", "Annual Accounts"),
    Service("s-jones-sa", "c-jones", "Self Assessment"),
    Service("s-jones-bk", "c-jones", "Bookkeeping", status=ServiceStatus.INACTIVE),
]


def seed_database():
    """Add sample clients and services, then derive compliance items."""
    engine = build_engine()

    for client in SAMPLE_CLIENTS:
        engine.clients.add(client)
        print(f"Added client: {client.name} ({client.status.name})")

    for service in SAMPLE_SERVICES:
        engine.services.add(service)
        print(f"Added service: {service.kind} for {service.client_id}")

    report = engine.reconciler.reconcile_from_directory()
    print(f"\nReconciliation: {json.dumps(report.to_dict(), indent=2)}")


if __name__ == "__main__":
    # Initialize DB if needed
    from docket.db import create_all
    print("Ensuring database tables exist...")
    create_all()

    print("Seeding database with sample clients and services...")
    seed_database()

    print("\nDone! You can now run the API server with:")
    print("python -m api.main")
