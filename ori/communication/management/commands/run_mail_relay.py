import logging

from django.core.management.base import BaseCommand, CommandError
from ori.communication.models import EmailAccount
from ori.communication.relay import MailRelay

logger = logging.getLogger('ori.communication.relay')


class Command(BaseCommand):
    help = 'Send queued emails and sync inbound mail for connected accounts'

    def add_arguments(self, parser):
        parser.add_argument(
            '--once',
            action='store_true',
            help='Run a single cycle and exit',
        )
        parser.add_argument(
            '--interval',
            type=int,
            default=None,
            help='Seconds between cycles (default MAIL_RELAY_POLL_INTERVAL)',
        )
        parser.add_argument(
            '--fetch-interval',
            type=int,
            default=None,
            help='Minutes between inbound fetches (default MAIL_RELAY_FETCH_INTERVAL)',
        )
        parser.add_argument(
            '--account',
            action='append',
            type=int,
            default=[],
            help='Restrict to this account id (repeatable)',
        )

    def handle(self, *args, **options):
        account_ids = options['account']
        if account_ids:
            found = set(EmailAccount.objects.filter(id__in=account_ids).values_list('id', flat=True))
            missing = sorted(set(account_ids) - found)
            if missing:
                raise CommandError(f"Unknown email account(s): {', '.join(str(i) for i in missing)}")
        if options['interval'] is not None and options['interval'] <= 0:
            raise CommandError('--interval must be positive')

        relay = MailRelay(fetch_interval=options['fetch_interval'], account_ids=account_ids)

        if options['once']:
            result = relay.run_cycle()
            fetched = 'skipped' if result['fetched'] is None else result['fetched']
            self.stdout.write(self.style.SUCCESS(
                f"Sent {result['sent']}, failed {result['failed']}, fetched {fetched}"
            ))
            return

        self.stdout.write(self.style.SUCCESS('Mail relay started'))
        try:
            relay.run_forever(interval=options['interval'])
        except KeyboardInterrupt:
            logger.info('Mail relay stopped')
            self.stdout.write(self.style.WARNING('Mail relay stopped'))
