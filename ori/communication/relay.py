"""
Mail relay: sends queued outbound email and syncs inbound mail.

One cycle pushes every ``pending`` email through its account's transport,
then fetches inbound mail when the fetch interval has elapsed or when the
app asked for a sync (setting ``mail_sync`` -> ``last_sync_request``).

Transports:
    imap_smtp   -> SMTP through Django's mail backend
    mailersend  -> MailerSend REST API (POST /v1/email)
    nylas       -> Nylas v3 send endpoint

Inbound providers:
    imap_smtp   -> IMAP INBOX, UNSEEN messages, marked seen after fetch
    nylas       -> Nylas v3 messages endpoint
"""
import email
import html
import imaplib
import logging
import re
import smtplib
import time
from datetime import datetime, timedelta, timezone as dt_timezone
from email import policy
from email.utils import getaddresses, parseaddr, parsedate_to_datetime

import requests
from django.conf import settings
from django.core.mail import EmailMultiAlternatives, get_connection
from django.db import close_old_connections
from django.utils import timezone

from .models import Email, EmailAccount
from ori.core.utils import get_setting_json, notify

logger = logging.getLogger(__name__)

NO_SUBJECT = '(Sin asunto)'
TAG_RE = re.compile(r'<[^>]+>')
SPACE_RE = re.compile(r'[ \t]+')


class MailProviderError(Exception):
    """A transport or inbox provider failed"""


def html_to_text(value):
    text = re.sub(r'(?i)<br\s*/?>|</p>|</div>', '\n', value or '')
    text = html.unescape(TAG_RE.sub('', text))
    lines = [SPACE_RE.sub(' ', line).strip() for line in text.splitlines()]
    return '\n'.join(line for line in lines if line)


def text_to_html(value):
    return '<p>' + html.escape(value or '').replace('\n', '<br>') + '</p>'


def recipient_addresses(recipients):
    """Recipients are stored as {name, email} objects or bare strings"""
    addresses = []
    for recipient in recipients or []:
        if isinstance(recipient, dict):
            if recipient.get('email'):
                addresses.append(recipient['email'])
        elif recipient:
            addresses.append(str(recipient))
    return addresses


def recipient_objects(recipients):
    objects = []
    for recipient in recipients or []:
        if isinstance(recipient, dict):
            if recipient.get('email'):
                item = {'email': recipient['email']}
                if recipient.get('name'):
                    item['name'] = recipient['name']
                objects.append(item)
        elif recipient:
            objects.append({'email': str(recipient)})
    return objects


# Outbound transports

class SmtpTransport:
    def __init__(self, account):
        self.account = account

    def get_connection(self):
        port = self.account.smtp_port or settings.EMAIL_PORT
        use_ssl = port == 465
        return get_connection(
            host=self.account.smtp_host or settings.EMAIL_HOST,
            port=port,
            username=self.account.email,
            password=self.account.password,
            use_ssl=use_ssl,
            use_tls=not use_ssl and port == 587,
            timeout=settings.EMAIL_TIMEOUT,
            fail_silently=False,
        )

    def send(self, message):
        to = recipient_addresses(message.to)
        if not to:
            raise MailProviderError("El correo no tiene destinatarios.")
        mail = EmailMultiAlternatives(
            subject=message.subject or NO_SUBJECT,
            body=html_to_text(message.body),
            from_email=self.account.sender,
            to=to,
            cc=recipient_addresses(message.cc),
            connection=self.get_connection(),
        )
        mail.attach_alternative(message.body or '', 'text/html')
        try:
            mail.send()
        except (smtplib.SMTPException, OSError) as e:
            raise MailProviderError(f"SMTP: {str(e)}")
        return None


class MailerSendTransport:
    def __init__(self, account):
        self.account = account

    def send(self, message):
        api_key = self.account.api_key or settings.MAILERSEND_API_KEY
        if not api_key:
            raise MailProviderError("MailerSend: falta la API key.")
        payload = {
            'from': {'email': self.account.email, 'name': self.account.display_name or self.account.email},
            'to': recipient_objects(message.to),
            'subject': message.subject or NO_SUBJECT,
            'html': message.body or '',
            'text': html_to_text(message.body),
        }
        if message.cc:
            payload['cc'] = recipient_objects(message.cc)
        try:
            response = requests.post(
                f"{settings.MAILERSEND_API_URL}/v1/email",
                json=payload,
                headers={'Authorization': f"Bearer {api_key}"},
                timeout=settings.MAIL_RELAY_HTTP_TIMEOUT,
            )
        except requests.exceptions.RequestException as e:
            raise MailProviderError(f"MailerSend: {str(e)}")
        if response.status_code >= 400:
            raise MailProviderError(f"MailerSend {response.status_code}: {response.text[:500]}")
        return response.headers.get('X-Message-Id')


class NylasTransport:
    def __init__(self, account):
        self.account = account

    def send(self, message):
        payload = {
            'to': recipient_objects(message.to),
            'subject': message.subject or NO_SUBJECT,
            'body': message.body or '',
        }
        if message.cc:
            payload['cc'] = recipient_objects(message.cc)
        try:
            response = requests.post(
                f"{settings.NYLAS_API_URL}/v3/grants/{self.account.grant_id}/messages/send",
                json=payload,
                headers=nylas_headers(self.account),
                timeout=settings.MAIL_RELAY_HTTP_TIMEOUT,
            )
        except requests.exceptions.RequestException as e:
            raise MailProviderError(f"Nylas: {str(e)}")
        if response.status_code >= 400:
            raise MailProviderError(f"Nylas {response.status_code}: {response.text[:500]}")
        # Delivered at this point; a reply we cannot read only loses the message id
        try:
            return ((response.json() or {}).get('data') or {}).get('id')
        except (ValueError, AttributeError):
            logger.warning(f"Nylas accepted a message from {self.account.email} without a readable reply")
            return None


TRANSPORTS = {
    'imap_smtp': SmtpTransport,
    'mailersend': MailerSendTransport,
    'nylas': NylasTransport,
}


def get_transport(account):
    try:
        return TRANSPORTS[account.provider](account)
    except KeyError:
        raise MailProviderError(f"Proveedor sin transporte: {account.provider}")


# Inbound providers

def nylas_headers(account):
    api_key = account.api_key or settings.NYLAS_API_KEY
    if not api_key:
        raise MailProviderError("Nylas: falta la API key.")
    return {'Authorization': f"Bearer {api_key}", 'Accept': 'application/json'}


def part_content(part):
    """Decoded text of a MIME part; unknown charsets fall back to utf-8 with replacement"""
    try:
        return part.get_content()
    except LookupError:
        charset = part.get_content_charset()
        logger.warning(f"Unknown charset {charset!r}, decoding as utf-8")
        return (part.get_payload(decode=True) or b'').decode('utf-8', errors='replace')


class ImapInboxProvider:
    def __init__(self, account):
        self.account = account
        self.errors = []

    def connect(self):
        if not self.account.imap_host:
            raise MailProviderError("IMAP: host no configurado.")
        connection = imaplib.IMAP4_SSL(self.account.imap_host, self.account.imap_port or 993)
        connection.login(self.account.email, self.account.password)
        return connection

    def fetch(self, limit):
        try:
            connection = self.connect()
        except (imaplib.IMAP4.error, OSError) as e:
            raise MailProviderError(f"IMAP: {str(e)}")

        messages = []
        try:
            connection.select('INBOX')
            typ, data = connection.uid('search', None, 'UNSEEN')
            if typ != 'OK':
                raise MailProviderError(f"IMAP search failed: {typ}")
            uids = data[0].split() if data and data[0] else []
            for uid in uids[:limit]:
                typ, parts = connection.uid('fetch', uid, '(RFC822)')
                if typ != 'OK' or not parts or not isinstance(parts[0], tuple):
                    logger.warning(f"IMAP fetch of uid {uid!r} for {self.account.email} returned {typ}")
                    continue
                try:
                    messages.append(self.parse(uid.decode(), parts[0][1]))
                except Exception as e:
                    # Left unseen so the next sync picks it up again
                    logger.exception(f"IMAP message {uid!r} for {self.account.email} could not be read")
                    self.errors.append(f"IMAP uid {uid.decode()}: {str(e)}")
                    continue
                connection.uid('store', uid, '+FLAGS', '(\\Seen)')
        except (imaplib.IMAP4.error, OSError) as e:
            raise MailProviderError(f"IMAP: {str(e)}")
        finally:
            try:
                connection.logout()
            except (imaplib.IMAP4.error, OSError):
                logger.warning(f"IMAP logout failed for {self.account.email}")
        return messages

    def parse(self, uid, raw):
        message = email.message_from_bytes(raw, policy=policy.default)
        from_name, from_email = parseaddr(str(message.get('From', '')))

        html_part = message.get_body(preferencelist=('html',))
        text_part = message.get_body(preferencelist=('plain',))
        if html_part is not None:
            body = part_content(html_part)
        elif text_part is not None:
            body = text_to_html(part_content(text_part))
        else:
            body = ''

        try:
            timestamp = parsedate_to_datetime(message['Date']) if message['Date'] else timezone.now()
        except (TypeError, ValueError):
            timestamp = timezone.now()
        if timezone.is_naive(timestamp):
            timestamp = timezone.make_aware(timestamp, dt_timezone.utc)

        return {
            'provider_message_id': (message.get('Message-ID') or '').strip() or f"imap-{uid}",
            'thread_id': (message.get('In-Reply-To') or '').strip(),
            'from_name': from_name or from_email,
            'from_email': from_email,
            'to': [{'name': name, 'email': address}
                   for name, address in getaddresses(message.get_all('To', []))],
            'cc': [{'name': name, 'email': address}
                   for name, address in getaddresses(message.get_all('Cc', []))],
            'subject': message.get('Subject') or '',
            'body': body,
            'timestamp': timestamp,
            'unread': True,
            'attachments': [
                {
                    'filename': part.get_filename() or 'adjunto',
                    'content_type': part.get_content_type(),
                    'size': len(part.get_payload(decode=True) or b''),
                }
                for part in message.iter_attachments()
            ],
        }


class NylasInboxProvider:
    def __init__(self, account):
        self.account = account
        self.errors = []

    def fetch(self, limit):
        if not self.account.grant_id:
            raise MailProviderError("Nylas: falta el grant id.")
        try:
            response = requests.get(
                f"{settings.NYLAS_API_URL}/v3/grants/{self.account.grant_id}/messages",
                params={'limit': limit},
                headers=nylas_headers(self.account),
                timeout=settings.MAIL_RELAY_HTTP_TIMEOUT,
            )
            response.raise_for_status()
            payload = response.json()
        except requests.exceptions.RequestException as e:
            raise MailProviderError(f"Nylas: {str(e)}")
        except ValueError:
            raise MailProviderError("Nylas: respuesta inválida.")
        messages = []
        for item in payload.get('data') or []:
            try:
                messages.append(self.parse(item))
            except Exception as e:
                logger.exception(f"Nylas message {item.get('id')!r} for {self.account.email} could not be read")
                self.errors.append(f"Nylas {item.get('id')}: {str(e)}")
        return messages

    def parse(self, item):
        sender = (item.get('from') or [{}])[0]
        body = item.get('body') or ''
        if body and not TAG_RE.search(body):
            body = text_to_html(body)
        date = item.get('date')
        timestamp = datetime.fromtimestamp(date, tz=dt_timezone.utc) if date else timezone.now()
        return {
            'provider_message_id': item.get('id'),
            'thread_id': item.get('thread_id') or '',
            'from_name': sender.get('name') or sender.get('email', ''),
            'from_email': sender.get('email', ''),
            'to': item.get('to') or [],
            'cc': item.get('cc') or [],
            'subject': item.get('subject') or '',
            'body': body or item.get('snippet') or '',
            'timestamp': timestamp,
            'unread': bool(item.get('unread', True)),
            'attachments': [
                {'filename': a.get('filename'), 'content_type': a.get('content_type'), 'size': a.get('size')}
                for a in item.get('attachments') or []
            ],
        }


INBOX_PROVIDERS = {
    'imap_smtp': ImapInboxProvider,
    'nylas': NylasInboxProvider,
}


def store_inbound(account, messages):
    """Save fetched messages, skipping ids already stored for the account; returns the new emails"""
    created = []
    for data in messages:
        message_id = data.get('provider_message_id')
        if message_id and Email.objects.filter(account=account, provider_message_id=message_id).exists():
            continue
        from_email = data.get('from_email') or ''
        folder = 'sent' if from_email.lower() == account.email.lower() else 'inbox'
        mail = Email.objects.create(
            account=account,
            provider_message_id=message_id,
            thread_id=data.get('thread_id') or '',
            from_name=(data.get('from_name') or '')[:255],
            from_email=from_email,
            to=data.get('to') or [{'name': 'Yo', 'email': account.email}],
            cc=data.get('cc') or [],
            subject=(data.get('subject') or NO_SUBJECT)[:998],
            body=data.get('body') or '',
            timestamp=data.get('timestamp') or timezone.now(),
            folder=folder,
            status='unread' if data.get('unread', True) else 'read',
            delivery_status='received',
            attachments=data.get('attachments') or [],
        )
        created.append(mail)
        if folder == 'inbox':
            notify(
                account.user,
                f"Nuevo correo de {mail.from_name or mail.from_email}",
                mail.subject,
                type='email',
                link=f"/emails/{mail.id}",
            )
    return created


class MailRelay:
    def __init__(self, fetch_interval=None, account_ids=None, fetch_limit=None):
        minutes = fetch_interval if fetch_interval is not None else settings.MAIL_RELAY_FETCH_INTERVAL
        self.fetch_interval = timedelta(minutes=minutes)
        self.fetch_limit = fetch_limit or settings.MAIL_RELAY_FETCH_LIMIT
        self.account_ids = list(account_ids or [])
        self.last_fetch_at = None
        self.last_sync_request = None

    def accounts(self):
        accounts = EmailAccount.objects.filter(is_active=True).select_related('user')
        if self.account_ids:
            accounts = accounts.filter(id__in=self.account_ids)
        return accounts

    def push_pending(self):
        pending = Email.objects.filter(delivery_status='pending', account__is_active=True).select_related(
            'account', 'account__user'
        )
        if self.account_ids:
            pending = pending.filter(account_id__in=self.account_ids)

        sent = failed = 0
        for message in pending:
            try:
                provider_id = get_transport(message.account).send(message)
            except MailProviderError as e:
                logger.error(f"Email {message.id} from {message.account.email} failed: {str(e)}")
                self.mark_failed(message, str(e))
                failed += 1
                continue
            except Exception as e:
                logger.exception(f"Email {message.id} from {message.account.email} failed unexpectedly")
                self.mark_failed(message, f"{type(e).__name__}: {str(e)}")
                failed += 1
                continue
            message.delivery_status = 'sent'
            message.folder = 'sent'
            message.delivery_error = ''
            if provider_id:
                message.provider_message_id = provider_id
            message.save(update_fields=['delivery_status', 'folder', 'delivery_error', 'provider_message_id'])
            logger.info(f"Email {message.id} sent to {', '.join(recipient_addresses(message.to))}")
            sent += 1
        return sent, failed

    def mark_failed(self, message, error):
        message.delivery_status = 'error'
        message.delivery_error = error
        message.save(update_fields=['delivery_status', 'delivery_error'])

    def should_fetch(self, now):
        requested = (get_setting_json('mail_sync', {}) or {}).get('last_sync_request')
        signalled = bool(requested) and requested != self.last_sync_request
        self.last_sync_request = requested
        if signalled:
            logger.info(f"Sync requested from the app at {requested}")
            return True
        return self.last_fetch_at is None or now - self.last_fetch_at >= self.fetch_interval

    def fetch_inbound(self, now):
        fetched = 0
        for account in self.accounts().filter(provider__in=list(INBOX_PROVIDERS)):
            provider = INBOX_PROVIDERS[account.provider](account)
            try:
                created = store_inbound(account, provider.fetch(self.fetch_limit))
            except MailProviderError as e:
                account.sync_status = 'error'
                account.sync_error = str(e)
                logger.error(f"Inbound sync for {account.email} failed: {str(e)}")
            except Exception as e:
                account.sync_status = 'error'
                account.sync_error = f"{type(e).__name__}: {str(e)}"
                logger.exception(f"Inbound sync for {account.email} failed unexpectedly")
            else:
                account.sync_status = 'error' if provider.errors else 'ok'
                account.sync_error = '; '.join(provider.errors)[:1000]
                fetched += len(created)
                if created:
                    logger.info(f"{len(created)} new emails for {account.email}")
            account.last_sync_at = now
            account.save(update_fields=['sync_status', 'sync_error', 'last_sync_at'])
        self.last_fetch_at = now
        return fetched

    def run_cycle(self, now=None):
        now = now or timezone.now()
        sent, failed = self.push_pending()
        fetched = None
        if self.should_fetch(now):
            fetched = self.fetch_inbound(now)
        logger.info(f"Relay cycle: {sent} sent, {failed} failed, "
                    f"{'no fetch' if fetched is None else f'{fetched} fetched'}")
        return {'sent': sent, 'failed': failed, 'fetched': fetched}

    def run_forever(self, interval=None):
        interval = interval or settings.MAIL_RELAY_POLL_INTERVAL
        while True:
            close_old_connections()
            try:
                self.run_cycle()
            except Exception:
                logger.exception("Relay cycle failed, retrying next cycle")
            time.sleep(interval)
