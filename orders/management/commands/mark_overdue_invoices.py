# orders/management/commands/mark_overdue_invoices.py

from __future__ import annotations

from django.core.management.base import BaseCommand

from orders.services import mark_overdue_invoices


class Command(BaseCommand):
    help = "Flip pending invoices past their due date to overdue (run daily)."

    def handle(self, *args, **options):
        updated = mark_overdue_invoices()
        self.stdout.write(self.style.SUCCESS(f"{updated} invoice(s) marked overdue."))
