"""
docket.reconcile
================

Derive compliance items from the services clients have engaged.

:meth:`ReconciliationEngine.reconcile` sweeps every active service;
:meth:`ReconciliationEngine.ensure_compliance_for_service` handles one
service when it is created or edited. Both are idempotent: a
(client, service, type) triple never gets a second non-FILED item.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date
from typing import Dict, Iterable, List, Optional

from .directory import ClientDirectory, ServiceDirectory
from .due_dates import due_date_for_service
from .mapping import ComplianceRule, compliance_types_for_service
from .models import (
    Client,
    ClientStatus,
    ComplianceItem,
    ComplianceStatus,
    Service,
    ServiceStatus,
)
from .registry import ComplianceRegistry
from .reports import ReconcileReport, SyncReport

logger = logging.getLogger(__name__)


class ReconciliationEngine:
    def __init__(
        self,
        registry: ComplianceRegistry,
        clients: ClientDirectory,
        services: Optional[ServiceDirectory] = None,
    ) -> None:
        self._registry = registry
        self._clients = clients
        self._services = services

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _build_item(client: Client, service: Service, rule: ComplianceRule, today: Optional[date]) -> ComplianceItem:
        return ComplianceItem(
            client_id=client.id,
            service_id=service.id,
            type=rule.type.value,
            description=f"{client.name} - {rule.description}",
            due_date=due_date_for_service(service, rule.type, today),
            source=rule.source,
            status=ComplianceStatus.PENDING,
            reference=client.registered_number or None,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def reconcile(self, all_services: Iterable[Service], today: Optional[date] = None) -> ReconcileReport:
        """Create missing items for every active service of every active client."""
        logger.info("Starting reconciliation of compliance items from services")
        all_services = list(all_services)
        active = [s for s in all_services if s.status == ServiceStatus.ACTIVE]

        by_client: Dict[str, List[Service]] = defaultdict(list)
        for service in active:
            by_client[service.client_id].append(service)

        report = ReconcileReport()
        report.debug.total_services = len(all_services)
        report.debug.active_services = len(active)
        report.debug.clients_with_services = len(by_client)
        logger.info(
            f"Found {len(all_services)} total services, {len(active)} active, "
            f"{len(by_client)} clients with active services"
        )

        for client_id, services in by_client.items():
            try:
                client = self._clients.resolve(client_id)
            except Exception as exc:
                msg = f"Failed to process client {client_id}: {exc}"
                logger.error(msg)
                report.errors.append(msg)
                continue

            if client is None:
                logger.warning(f"Client {client_id} not found, skipping {len(services)} services")
                report.debug.clients_not_found += 1
                continue
            if client.status != ClientStatus.ACTIVE:
                logger.debug(f"Client {client.name} ({client.ref}) is not active, skipping")
                continue

            for service in services:
                report.debug.services_processed += 1
                rules = compliance_types_for_service(service.kind)
                if not rules:
                    logger.debug(f"No compliance mapping for service kind: {service.kind}")
                    continue

                for rule in rules:
                    try:
                        item = self._build_item(client, service, rule, today)
                        created = self._registry.create_unless_live(item)
                    except Exception as exc:
                        msg = f"Failed to create {rule.type.value} for {client.name}: {exc}"
                        logger.error(msg)
                        report.errors.append(msg)
                        continue

                    if created is None:
                        report.skipped += 1
                        logger.debug(f"{rule.type.value} already tracked for {client.name}")
                    else:
                        report.generated += 1

        logger.info(
            f"Reconciliation complete: {report.generated} generated, {report.skipped} skipped, "
            f"{len(report.errors)} errors, {report.debug.clients_not_found} clients not found"
        )
        return report

    def reconcile_from_directory(self, today: Optional[date] = None) -> ReconcileReport:
        if self._services is None:
            raise RuntimeError("reconcile_from_directory needs a ServiceDirectory")
        return self.reconcile(self._services.list_all(), today)

    def ensure_compliance_for_service(
        self, client: Optional[Client], service: Optional[Service], today: Optional[date] = None
    ) -> int:
        """Create missing items for one service; returns how many were created."""
        if not client or not client.id or not service or not service.id or not service.kind:
            return 0

        created = 0
        for rule in compliance_types_for_service(service.kind):
            if self._registry.create_unless_live(self._build_item(client, service, rule, today)):
                created += 1
        if created:
            logger.info(f"Created {created} compliance items for service {service.id}")
        return created

    def sync_service_due_dates(self, service: Service) -> SyncReport:
        """Copy a service's ``next_due`` onto its non-FILED items."""
        report = SyncReport()
        if not service.next_due:
            logger.debug(f"Service {service.id} has no next_due date")
            return report

        for item in self._registry.by_service(service.id):
            if item.status == ComplianceStatus.FILED or item.due_date == service.next_due:
                continue
            try:
                self._registry.update(item.id, {"due_date": service.next_due})
                report.synced += 1
            except Exception as exc:
                msg = f"Failed to sync compliance item {item.id}: {exc}"
                logger.error(msg)
                report.errors.append(msg)
        logger.info(f"Synced {report.synced} compliance due dates for service {service.id}")
        return report
