from datetime import date

from django.core.management.base import BaseCommand, CommandError
from ori.billing.models import Invoice
from ori.billing.services import mark_overdue_invoices


class Command(BaseCommand):
    help = 'Mark sent or partially paid invoices past their due date as overdue (Vencida)'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='List the invoices that would be marked without changing them',
        )
        parser.add_argument(
            '--date',
            help='Evaluate as of this date (YYYY-MM-DD) instead of today',
        )

    def handle(self, *args, **options):
        today = None
        if options.get('date'):
            try:
                today = date.fromisoformat(options['date'])
            except ValueError:
                raise CommandError(f"Invalid --date value: {options['date']}")

        if options['dry_run']:
            self.stdout.write(self.style.WARNING('DRY RUN MODE - No changes will be made'))
            candidates = Invoice.objects.filter(status__in=['enviada', 'pagada_parcialmente'])
            candidates = [invoice for invoice in candidates if invoice.is_overdue(today)]
            for invoice in candidates:
                self.stdout.write(f'  {invoice.number} due {invoice.due_date} balance {invoice.balance}')
            self.stdout.write(f'{len(candidates)} invoice(s) would be marked as overdue')
            return

        updated = mark_overdue_invoices(today=today)
        self.stdout.write(self.style.SUCCESS(f'Marked {updated} invoice(s) as overdue'))
