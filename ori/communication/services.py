import logging

from django.utils import timezone

from .models import Email, SignatureTemplate
from ori.core.utils import set_setting_json

logger = logging.getLogger(__name__)


class EmailError(Exception):
    pass


def resolve_signature(user, signature_id=None):
    signatures = SignatureTemplate.objects.filter(owner=user)
    if signature_id:
        return signatures.filter(pk=signature_id).first()
    return signatures.filter(is_default=True).first()


def compose_email(account, user, to, subject='', body='', cc=None, send=True, signature=None,
                  attachments=None, company=None, contact=None, prospect=None):
    """Queue an email for the relay (send=True) or save it as a draft"""
    if send and not to:
        raise EmailError("Agrega al menos un destinatario.")
    if signature is not None:
        body = f"{body}<br><br>{signature.html}"

    email = Email.objects.create(
        account=account,
        from_name=account.display_name or user.get_display_name(),
        from_email=account.email,
        to=to or [],
        cc=cc or [],
        subject=subject or '',
        body=body or '',
        timestamp=timezone.now(),
        folder='sent' if send else 'drafts',
        status='read' if send else 'draft',
        delivery_status='pending' if send else '',
        attachments=attachments or [],
        company=company,
        contact=contact,
        prospect=prospect,
    )
    logger.info(f"Email {email.id} {'queued' if send else 'saved as draft'} by {user.username}")
    return email


def send_draft(email):
    if email.status != 'draft':
        raise EmailError("Solo se pueden enviar borradores.")
    if not email.to:
        raise EmailError("Agrega al menos un destinatario.")
    email.folder = 'sent'
    email.status = 'read'
    email.delivery_status = 'pending'
    email.timestamp = timezone.now()
    email.save(update_fields=['folder', 'status', 'delivery_status', 'timestamp'])
    return email


def retry_email(email):
    if email.delivery_status != 'error':
        raise EmailError("Solo se reintentan correos con error de envío.")
    email.delivery_status = 'pending'
    email.delivery_error = ''
    email.save(update_fields=['delivery_status', 'delivery_error'])
    return email


def move_to_trash(email):
    email.folder = 'trash'
    email.save(update_fields=['folder'])
    return email


def set_read(email, read=True):
    if email.status == 'draft':
        return email
    email.status = 'read' if read else 'unread'
    email.save(update_fields=['status'])
    return email


def request_sync(user):
    """Signal the relay to fetch inbound mail on its next cycle"""
    requested_at = timezone.now().isoformat()
    set_setting_json('mail_sync', {'last_sync_request': requested_at, 'requested_by': user.id},
                     description='Last inbound mail sync request')
    return requested_at
