"""
Test suite for the communication module
Tests: compose and drafts, folders, sync requests, relay transports, inbound sync, relay command, chats
"""
from datetime import timedelta
from email.message import EmailMessage
from io import StringIO
from unittest.mock import patch, MagicMock

import requests
from django.core import mail
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from ori.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from ori.core.models import Notification
from ori.core.utils import get_setting_json, set_setting_json
from ori.communication.models import Email, SignatureTemplate, ChatGroup
from ori.communication.relay import MailRelay, store_inbound, html_to_text, NO_SUBJECT
from ori.communication.services import EmailError, compose_email, send_draft, retry_email


def http_response(status_code=200, payload=None, headers=None, text=''):
    response = MagicMock()
    response.status_code = status_code
    response.headers = headers or {}
    response.text = text
    response.json.return_value = payload or {}
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(f'{status_code} Error')
    return response


def queue_email(account, to=None, subject='Cotización', body='<p>Adjunto cotización</p>'):
    return compose_email(account, account.user, to=to or [{'name': 'Cliente', 'email': 'cliente@example.com'}],
                         subject=subject, body=body)


def raw_message(message_id='<abc@cliente.com>', subject='Pedido semanal'):
    message = EmailMessage()
    message['From'] = 'Ana López <ana@cliente.com>'
    message['To'] = 'ventas@ori.test'
    message['Subject'] = subject
    message['Message-ID'] = message_id
    message['Date'] = 'Mon, 10 Mar 2025 10:00:00 -0600'
    message.set_content('Hola, necesitamos 20 ton')
    message.add_alternative('<p>Hola, necesitamos <b>20 ton</b></p>', subtype='html')
    return message.as_bytes()


class ComposeServiceTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.account = TestDataFactory.create_email_account(user=self.user)

    def test_send_queues_pending(self):
        email = queue_email(self.account)
        self.assertEqual(email.folder, 'sent')
        self.assertEqual(email.delivery_status, 'pending')
        self.assertEqual(email.from_email, self.account.email)

    def test_draft_has_no_delivery_status(self):
        email = compose_email(self.account, self.user, to=[], subject='Borrador', send=False)
        self.assertEqual(email.folder, 'drafts')
        self.assertEqual(email.status, 'draft')
        self.assertEqual(email.delivery_status, '')

    def test_send_requires_recipient(self):
        with self.assertRaises(EmailError):
            compose_email(self.account, self.user, to=[], subject='Sin nadie')

    def test_signature_appended(self):
        signature = SignatureTemplate.objects.create(name='Firma', html='<b>Ventas</b>', owner=self.user)
        email = compose_email(self.account, self.user, to=['a@example.com'], body='<p>Hola</p>',
                              signature=signature)
        self.assertEqual(email.body, '<p>Hola</p><br><br><b>Ventas</b>')

    def test_send_draft(self):
        draft = compose_email(self.account, self.user, to=[], send=False)
        with self.assertRaises(EmailError):
            send_draft(draft)
        draft.to = [{'name': '', 'email': 'a@example.com'}]
        draft.save()
        send_draft(draft)
        self.assertEqual(draft.folder, 'sent')
        self.assertEqual(draft.delivery_status, 'pending')
        with self.assertRaises(EmailError):
            send_draft(draft)

    def test_retry_only_errors(self):
        email = queue_email(self.account)
        with self.assertRaises(EmailError):
            retry_email(email)
        email.delivery_status = 'error'
        email.delivery_error = 'SMTP: timeout'
        email.save()
        retry_email(email)
        self.assertEqual(email.delivery_status, 'pending')
        self.assertEqual(email.delivery_error, '')


class RelayTransportTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()

    def test_html_to_text(self):
        self.assertEqual(html_to_text('<p>Hola<br>mundo</p>'), 'Hola\nmundo')
        self.assertEqual(html_to_text('<div>Precio &amp; flete</div>'), 'Precio & flete')

    def test_smtp_send(self):
        account = TestDataFactory.create_email_account(user=self.user)
        email = queue_email(account)
        relay = MailRelay()
        self.assertEqual(relay.push_pending(), (1, 0))

        self.assertEqual(len(mail.outbox), 1)
        sent = mail.outbox[0]
        self.assertEqual(sent.to, ['cliente@example.com'])
        self.assertEqual(sent.subject, 'Cotización')
        self.assertEqual(sent.body, 'Adjunto cotización')
        self.assertIn(account.email, sent.from_email)
        self.assertEqual(sent.alternatives[0][0], '<p>Adjunto cotización</p>')

        email.refresh_from_db()
        self.assertEqual(email.delivery_status, 'sent')

    @patch('ori.communication.relay.requests.post')
    def test_mailersend_send(self, mock_post):
        mock_post.return_value = http_response(202, headers={'X-Message-Id': 'ms-1'})
        account = TestDataFactory.create_email_account(user=self.user, provider='mailersend')
        email = queue_email(account)

        self.assertEqual(MailRelay().push_pending(), (1, 0))
        args, kwargs = mock_post.call_args
        self.assertTrue(args[0].endswith('/v1/email'))
        self.assertEqual(kwargs['json']['to'], [{'email': 'cliente@example.com', 'name': 'Cliente'}])
        self.assertEqual(kwargs['headers']['Authorization'], 'Bearer ms-key')

        email.refresh_from_db()
        self.assertEqual(email.delivery_status, 'sent')
        self.assertEqual(email.provider_message_id, 'ms-1')

    @patch('ori.communication.relay.requests.post')
    def test_mailersend_rejection_marks_error(self, mock_post):
        mock_post.return_value = http_response(422, text='The to field is invalid')
        account = TestDataFactory.create_email_account(user=self.user, provider='mailersend')
        email = queue_email(account)

        self.assertEqual(MailRelay().push_pending(), (0, 1))
        email.refresh_from_db()
        self.assertEqual(email.delivery_status, 'error')
        self.assertTrue(email.delivery_error.startswith('MailerSend 422'))

    @patch('ori.communication.relay.requests.post')
    def test_nylas_send(self, mock_post):
        mock_post.return_value = http_response(200, payload={'data': {'id': 'ny-sent'}})
        account = TestDataFactory.create_email_account(user=self.user, provider='nylas')
        email = queue_email(account)

        MailRelay().push_pending()
        self.assertIn('/v3/grants/grant-123/messages/send', mock_post.call_args[0][0])
        email.refresh_from_db()
        self.assertEqual(email.provider_message_id, 'ny-sent')

    @patch('ori.communication.relay.requests.post')
    def test_nylas_unreadable_reply_counts_as_sent(self, mock_post):
        response = http_response(200)
        response.json.side_effect = ValueError('Expecting value')
        mock_post.return_value = response
        account = TestDataFactory.create_email_account(user=self.user, provider='nylas')
        email = queue_email(account)

        relay = MailRelay()
        self.assertEqual(relay.push_pending(), (1, 0))
        self.assertEqual(relay.push_pending(), (0, 0))
        self.assertEqual(mock_post.call_count, 1)
        email.refresh_from_db()
        self.assertEqual(email.delivery_status, 'sent')
        self.assertEqual(email.folder, 'sent')

    @patch('ori.communication.relay.SmtpTransport.send')
    def test_unexpected_send_error_marks_error(self, mock_send):
        mock_send.side_effect = UnicodeEncodeError('ascii', 'ñ', 0, 1, 'ordinal not in range')
        account = TestDataFactory.create_email_account(user=self.user)
        first = queue_email(account, subject='Primero')
        second = queue_email(account, subject='Segundo')

        self.assertEqual(MailRelay().push_pending(), (0, 2))
        for email in (first, second):
            email.refresh_from_db()
            self.assertEqual(email.delivery_status, 'error')
            self.assertTrue(email.delivery_error.startswith('UnicodeEncodeError'))

    def test_inactive_account_is_skipped(self):
        account = TestDataFactory.create_email_account(user=self.user, is_active=False)
        email = queue_email(account)
        self.assertEqual(MailRelay().push_pending(), (0, 0))
        email.refresh_from_db()
        self.assertEqual(email.delivery_status, 'pending')


class InboundSyncTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()

    def test_store_inbound_dedupes_and_notifies(self):
        account = TestDataFactory.create_email_account(user=self.user)
        message = {'provider_message_id': 'm-1', 'from_name': 'Ana', 'from_email': 'ana@cliente.com',
                   'subject': '', 'body': '<p>Hola</p>'}
        created = store_inbound(account, [message])
        self.assertEqual(len(created), 1)
        self.assertEqual(created[0].subject, NO_SUBJECT)
        self.assertEqual(created[0].folder, 'inbox')
        self.assertEqual(created[0].status, 'unread')
        notification = Notification.objects.get(user=self.user)
        self.assertEqual(notification.title, 'Nuevo correo de Ana')
        self.assertEqual(notification.link, f'/emails/{created[0].id}')

        self.assertEqual(store_inbound(account, [message]), [])

    def test_own_messages_land_in_sent(self):
        account = TestDataFactory.create_email_account(user=self.user)
        created = store_inbound(account, [{'provider_message_id': 'm-2', 'from_email': account.email.upper(),
                                           'subject': 'Enviado desde el celular'}])
        self.assertEqual(created[0].folder, 'sent')
        self.assertFalse(Notification.objects.exists())

    @patch('ori.communication.relay.imaplib.IMAP4_SSL')
    def test_imap_fetch(self, mock_imap):
        account = TestDataFactory.create_email_account(user=self.user)
        connection = MagicMock()
        mock_imap.return_value = connection
        raw = raw_message()

        def uid(command, *args):
            if command == 'search':
                return 'OK', [b'7']
            if command == 'fetch':
                return 'OK', [(b'7 (RFC822 {%d}' % len(raw), raw), b')']
            return 'OK', [b'']
        connection.uid.side_effect = uid

        relay = MailRelay()
        self.assertEqual(relay.fetch_inbound(timezone.now()), 1)
        connection.login.assert_called_once_with(account.email, 'secret')
        connection.uid.assert_any_call('store', b'7', '+FLAGS', '(\\Seen)')
        connection.logout.assert_called_once()

        email = Email.objects.get(account=account)
        self.assertEqual(email.provider_message_id, '<abc@cliente.com>')
        self.assertEqual(email.from_name, 'Ana López')
        self.assertEqual(email.from_email, 'ana@cliente.com')
        self.assertEqual(email.subject, 'Pedido semanal')
        self.assertIn('<b>20 ton</b>', email.body)
        self.assertEqual(email.to, [{'name': '', 'email': 'ventas@ori.test'}])
        account.refresh_from_db()
        self.assertEqual(account.sync_status, 'ok')
        self.assertIsNotNone(account.last_sync_at)

    @patch('ori.communication.relay.imaplib.IMAP4_SSL')
    def test_imap_unknown_charset_is_stored(self, mock_imap):
        account = TestDataFactory.create_email_account(user=self.user)
        connection = MagicMock()
        mock_imap.return_value = connection
        raw = (b'From: Luis Perez <luis@cliente.com>\r\n'
               b'To: ventas@ori.test\r\n'
               b'Subject: Factura pendiente\r\n'
               b'Message-ID: <charset@cliente.com>\r\n'
               b'MIME-Version: 1.0\r\n'
               b'Content-Type: text/plain; charset="x-unknown-cs"\r\n'
               b'Content-Transfer-Encoding: 8bit\r\n'
               b'\r\n'
               b'Precio final 1500\r\n')

        def uid(command, *args):
            if command == 'search':
                return 'OK', [b'9']
            if command == 'fetch':
                return 'OK', [(b'9 (RFC822 {%d}' % len(raw), raw), b')']
            return 'OK', [b'']
        connection.uid.side_effect = uid

        self.assertEqual(MailRelay().fetch_inbound(timezone.now()), 1)
        connection.uid.assert_any_call('store', b'9', '+FLAGS', '(\\Seen)')
        email = Email.objects.get(account=account)
        self.assertEqual(email.subject, 'Factura pendiente')
        self.assertIn('Precio final 1500', email.body)
        account.refresh_from_db()
        self.assertEqual(account.sync_status, 'ok')

    @patch('ori.communication.relay.ImapInboxProvider.parse')
    @patch('ori.communication.relay.imaplib.IMAP4_SSL')
    def test_unreadable_imap_message_stays_unseen(self, mock_imap, mock_parse):
        account = TestDataFactory.create_email_account(user=self.user)
        connection = MagicMock()
        mock_imap.return_value = connection

        def uid(command, *args):
            if command == 'search':
                return 'OK', [b'7 8']
            if command == 'fetch':
                return 'OK', [(b'%s (RFC822 {3}' % args[0], b'raw'), b')']
            return 'OK', [b'']
        connection.uid.side_effect = uid
        mock_parse.side_effect = [
            RuntimeError('cabecera rota'),
            {'provider_message_id': 'imap-8', 'from_name': 'Ana', 'from_email': 'ana@cliente.com',
             'subject': 'Pedido', 'body': '<p>Hola</p>'},
        ]

        self.assertEqual(MailRelay().fetch_inbound(timezone.now()), 1)
        stores = [c for c in connection.uid.call_args_list if c[0][0] == 'store']
        self.assertEqual(stores, [(('store', b'8', '+FLAGS', '(\\Seen)'),)])
        self.assertTrue(Email.objects.filter(account=account, provider_message_id='imap-8').exists())
        account.refresh_from_db()
        self.assertEqual(account.sync_status, 'error')
        self.assertIn('cabecera rota', account.sync_error)
        self.assertIsNotNone(account.last_sync_at)

    @patch('ori.communication.relay.store_inbound')
    @patch('ori.communication.relay.requests.get')
    def test_failing_account_does_not_stop_the_others(self, mock_get, mock_store):
        mock_get.return_value = http_response(200, payload={'data': []})
        broken = TestDataFactory.create_email_account(user=self.user, email='a@ventas.test.com', provider='nylas')
        healthy = TestDataFactory.create_email_account(user=self.user, email='b@ventas.test.com', provider='nylas')

        def store(account, messages):
            if account.id == broken.id:
                raise LookupError('unknown encoding: x-unknown-cs')
            return []
        mock_store.side_effect = store

        MailRelay().fetch_inbound(timezone.now())
        broken.refresh_from_db()
        healthy.refresh_from_db()
        self.assertEqual(broken.sync_status, 'error')
        self.assertEqual(broken.sync_error, 'LookupError: unknown encoding: x-unknown-cs')
        self.assertEqual(healthy.sync_status, 'ok')
        self.assertIsNotNone(broken.last_sync_at)
        self.assertIsNotNone(healthy.last_sync_at)

    def test_imap_without_host_marks_error(self):
        account = TestDataFactory.create_email_account(user=self.user, imap_host='')
        self.assertEqual(MailRelay().fetch_inbound(timezone.now()), 0)
        account.refresh_from_db()
        self.assertEqual(account.sync_status, 'error')
        self.assertIn('host', account.sync_error)

    @patch('ori.communication.relay.requests.get')
    def test_nylas_fetch(self, mock_get):
        account = TestDataFactory.create_email_account(user=self.user, provider='nylas')
        mock_get.return_value = http_response(200, payload={'data': [{
            'id': 'ny-1',
            'thread_id': 'th-1',
            'from': [{'name': 'Ana', 'email': 'ana@cliente.com'}],
            'to': [{'email': account.email}],
            'subject': 'Pedido',
            'body': 'Hola\nequipo',
            'date': 1741622400,
            'unread': True,
        }]})

        relay = MailRelay()
        self.assertEqual(relay.fetch_inbound(timezone.now()), 1)
        self.assertEqual(mock_get.call_args[1]['params'], {'limit': relay.fetch_limit})
        email = Email.objects.get(provider_message_id='ny-1')
        self.assertEqual(email.body, '<p>Hola<br>equipo</p>')
        self.assertEqual(email.thread_id, 'th-1')
        self.assertEqual(email.timestamp.year, 2025)

        self.assertEqual(relay.fetch_inbound(timezone.now()), 0)

    @patch('ori.communication.relay.requests.get')
    def test_nylas_network_error(self, mock_get):
        mock_get.side_effect = requests.exceptions.ConnectionError('down')
        account = TestDataFactory.create_email_account(user=self.user, provider='nylas')
        MailRelay().fetch_inbound(timezone.now())
        account.refresh_from_db()
        self.assertEqual(account.sync_status, 'error')
        self.assertTrue(account.sync_error.startswith('Nylas'))

    def test_mailersend_accounts_are_not_fetched(self):
        account = TestDataFactory.create_email_account(user=self.user, provider='mailersend')
        MailRelay().fetch_inbound(timezone.now())
        account.refresh_from_db()
        self.assertEqual(account.sync_status, 'never')


class RelayScheduleTests(TestCase):
    def setUp(self):
        self.now = timezone.now()
        self.relay = MailRelay(fetch_interval=15)

    def test_first_cycle_fetches(self):
        self.assertTrue(self.relay.should_fetch(self.now))

    def test_interval(self):
        self.relay.last_fetch_at = self.now
        self.assertFalse(self.relay.should_fetch(self.now + timedelta(minutes=5)))
        self.assertTrue(self.relay.should_fetch(self.now + timedelta(minutes=15)))

    def test_sync_request_triggers_once(self):
        self.relay.last_fetch_at = self.now
        set_setting_json('mail_sync', {'last_sync_request': '2025-03-10T10:00:00'})
        self.assertTrue(self.relay.should_fetch(self.now + timedelta(minutes=1)))
        self.assertFalse(self.relay.should_fetch(self.now + timedelta(minutes=2)))

    def test_run_cycle_skips_fetch(self):
        self.relay.last_fetch_at = self.now
        result = self.relay.run_cycle(now=self.now + timedelta(minutes=1))
        self.assertEqual(result, {'sent': 0, 'failed': 0, 'fetched': None})

    @patch('ori.communication.relay.time.sleep')
    @patch('ori.communication.relay.close_old_connections')
    @patch.object(MailRelay, 'run_cycle')
    def test_run_forever_survives_a_failed_cycle(self, mock_cycle, mock_close, mock_sleep):
        mock_cycle.side_effect = [RuntimeError('database gone'), {'sent': 0, 'failed': 0, 'fetched': 0}]
        mock_sleep.side_effect = [None, KeyboardInterrupt]

        with self.assertRaises(KeyboardInterrupt):
            self.relay.run_forever(interval=5)
        self.assertEqual(mock_cycle.call_count, 2)
        self.assertEqual(mock_close.call_count, 2)
        mock_sleep.assert_called_with(5)


class MailRelayCommandTests(TestCase):
    @patch('ori.communication.relay.requests.post')
    def test_once(self, mock_post):
        mock_post.return_value = http_response(202, headers={'X-Message-Id': 'ms-9'})
        account = TestDataFactory.create_email_account(provider='mailersend')
        queue_email(account)
        out = StringIO()
        call_command('run_mail_relay', '--once', stdout=out)
        self.assertIn('Sent 1, failed 0, fetched 0', out.getvalue())

    def test_unknown_account(self):
        with self.assertRaises(CommandError):
            call_command('run_mail_relay', '--once', '--account', '999999', stdout=StringIO())

    def test_interval_must_be_positive(self):
        with self.assertRaises(CommandError):
            call_command('run_mail_relay', '--interval', '0', stdout=StringIO())


class EmailAPITests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.account = TestDataFactory.create_email_account(user=self.user)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def inbound(self, **kwargs):
        data = {'account': self.account, 'from_email': 'ana@cliente.com', 'subject': 'Hola',
                'timestamp': timezone.now()}
        data.update(kwargs)
        return Email.objects.create(**data)

    def test_compose_with_default_signature(self):
        SignatureTemplate.objects.create(name='Firma', html='<b>Ventas</b>', is_default=True, owner=self.user)
        response = self.client.post('/api/v1/emails/compose/', {
            'account': self.account.id,
            'to': ['cliente@example.com'],
            'subject': 'Cotización',
            'body': '<p>Adjunto</p>',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['body'], '<p>Adjunto</p><br><br><b>Ventas</b>')
        self.assertEqual(response.data['delivery_status'], 'pending')
        self.assertEqual(response.data['to'], [{'name': '', 'email': 'cliente@example.com'}])

    def test_compose_draft_and_missing_recipient(self):
        response = self.client.post('/api/v1/emails/compose/', {
            'account': self.account.id, 'subject': 'Pendiente', 'send': False,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['folder'], 'drafts')

        response = self.client.post('/api/v1/emails/compose/', {'account': self.account.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_compose_from_foreign_account(self):
        other = TestDataFactory.create_email_account()
        response = self.client.post('/api/v1/emails/compose/', {
            'account': other.id, 'to': ['cliente@example.com'],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_by_folder(self):
        self.inbound()
        self.inbound(folder='trash')
        TestDataFactory.create_email_account().emails.create(from_email='x@y.com', timestamp=timezone.now())
        response = self.client.get('/api/v1/emails/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
        response = self.client.get('/api/v1/emails/?folder=spam')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_open_marks_read(self):
        email = self.inbound()
        response = self.client.get(f'/api/v1/emails/{email.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'read')
        response = self.client.post(f'/api/v1/emails/{email.id}/read/', {'read': False}, format='json')
        self.assertEqual(response.data['status'], 'unread')

    def test_delete_only_from_trash(self):
        email = self.inbound()
        response = self.client.delete(f'/api/v1/emails/{email.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.post(f'/api/v1/emails/{email.id}/trash/', format='json')
        self.assertEqual(response.data['folder'], 'trash')
        response = self.client.delete(f'/api/v1/emails/{email.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)

    def test_received_email_only_accepts_links(self):
        email = self.inbound()
        company = TestDataFactory.create_company()
        response = self.client.patch(f'/api/v1/emails/{email.id}/', {'subject': 'Otro'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.patch(f'/api/v1/emails/{email.id}/', {'company': company.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['company'], company.id)

    def test_request_sync(self):
        response = self.client.post('/api/v1/emails/sync/', format='json')
        self.assertEqual(response.status_code, status.HTTP_202_ACCEPTED)
        setting = get_setting_json('mail_sync')
        self.assertEqual(setting['last_sync_request'], response.data['last_sync_request'])
        self.assertEqual(setting['requested_by'], self.user.id)

    def test_folder_counts(self):
        self.inbound()
        self.inbound(status='read')
        queue_email(self.account)
        response = self.client.get('/api/v1/emails/counts/')
        self.assertEqual(response.data['inbox_unread'], 1)
        self.assertEqual(response.data['pending'], 1)

    def test_account_requires_imap_host(self):
        response = self.client.post('/api/v1/email-accounts/', {
            'email': 'otra@ventas.test.com', 'provider': 'imap_smtp', 'password': 'x',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.post('/api/v1/email-accounts/', {
            'email': 'otra@ventas.test.com', 'provider': 'imap_smtp', 'password': 'x', 'imap_host': 'imap.test.com',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['user'], self.user.id)
        self.assertNotIn('password', response.data)


class ChatAPITests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.other = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_creator_joins_group(self):
        response = self.client.post('/api/v1/chats/', {'name': 'Ventas Norte', 'members': [self.other.id]},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(set(response.data['members']), {self.user.id, self.other.id})

    def test_messages_and_unread(self):
        group = ChatGroup.objects.create(name='Logística', created_by=self.user)
        group.members.add(self.user, self.other)
        response = self.client.post(f'/api/v1/chats/{group.id}/messages/', {'text': 'Sale el camión'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        self.client.authenticate_user(self.other)
        response = self.client.get('/api/v1/chats/')
        self.assertEqual(response.data[0]['unread_count'], 1)
        response = self.client.post(f'/api/v1/chats/{group.id}/read/', format='json')
        self.assertEqual(response.data['marked'], 1)

    def test_only_creator_deletes(self):
        group = ChatGroup.objects.create(name='Compras', created_by=self.user)
        group.members.add(self.user, self.other)
        self.client.authenticate_user(self.other)
        response = self.client.delete(f'/api/v1/chats/{group.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.client.authenticate_user(self.user)
        response = self.client.delete(f'/api/v1/chats/{group.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
