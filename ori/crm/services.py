"""
CRM workflows: activity logging, pipeline moves, health score, prospect conversion
"""
import logging
from decimal import Decimal

from django.db import transaction
from django.db.models import Count, Sum
from django.utils import timezone

from .models import Company, Contact, Prospect, ActivityLog

logger = logging.getLogger(__name__)

NO_ACTIVITY_DAYS = 999
STALE_CONTACT_DAYS = 30


class PipelineError(Exception):
    """A stage change that the pipeline rules reject"""


def log_activity(type, description, user=None, company=None, prospect=None, contact=None, candidate=None):
    return ActivityLog.objects.create(
        type=type,
        description=description,
        user=user,
        company=company,
        prospect=prospect,
        contact=contact,
        candidate=candidate,
    )


def move_prospect_stage(prospect, stage, user=None, lost_reason='', lost_notes='',
                        paused_reason='', paused_until=None):
    """Move a prospect between pipeline columns; same-stage moves are a no-op"""
    valid_stages = dict(Prospect.STAGE_CHOICES)
    if stage not in valid_stages:
        raise PipelineError(f"Etapa inválida: {stage}")
    if prospect.stage == stage:
        return False
    if stage == 'perdido' and not lost_reason:
        raise PipelineError("Se requiere el motivo de pérdida.")

    old_label = prospect.get_stage_display()
    prospect.stage = stage
    update_fields = ['stage', 'updated_at']
    if stage == 'perdido':
        prospect.lost_reason = lost_reason
        prospect.lost_notes = lost_notes or ''
        update_fields += ['lost_reason', 'lost_notes']
    elif stage == 'pausado':
        prospect.paused_reason = paused_reason or ''
        prospect.paused_until = paused_until
        update_fields += ['paused_reason', 'paused_until']
    prospect.save(update_fields=update_fields)

    log_activity(
        'cambio_estado',
        f"Etapa cambiada de {old_label} a {valid_stages[stage]}",
        user=user,
        prospect=prospect,
        company=prospect.company,
    )
    return True


def move_company_stage(company, stage, user=None):
    valid_stages = dict(Company.STAGE_CHOICES)
    if stage not in valid_stages:
        raise PipelineError(f"Etapa inválida: {stage}")
    if company.stage == stage:
        return False

    old_label = company.get_stage_display()
    company.stage = stage
    company.save(update_fields=['stage', 'updated_at'])
    log_activity(
        'cambio_estado',
        f"Etapa cambiada de {old_label} a {valid_stages[stage]}",
        user=user,
        company=company,
    )
    return True


def build_pipeline_board(queryset, stage_choices, value_field=None, field='stage'):
    """Group a queryset into stage columns with counts and optional value sums"""
    aggregates = {'count': Count('id')}
    if value_field:
        aggregates['value'] = Sum(value_field)
    totals = {row[field]: row for row in queryset.order_by().values(field).annotate(**aggregates)}

    columns = []
    for stage, label in stage_choices:
        row = totals.get(stage, {})
        column = {'stage': stage, 'label': label, 'count': row.get('count', 0)}
        if value_field:
            column['value'] = row.get('value') or Decimal('0')
        columns.append(column)
    return columns


def compute_health_score(company, now=None):
    """
    recency = max(0, 100 - days_since_last_activity * 2)
    score = clamp(recency - open_tickets * 20 + sales_orders * 5, 0, 100)
    """
    now = now or timezone.now()
    last_activity = company.activities.order_by('-created_at').first()
    if last_activity:
        days_since = (now - last_activity.created_at).total_seconds() / 86400
    else:
        days_since = NO_ACTIVITY_DAYS

    open_tickets = company.tickets.filter(status='abierto').count()
    orders = company.sales_orders.all()
    sales_count = orders.count()
    lifetime_sales = orders.aggregate(total=Sum('total'))['total'] or Decimal('0')

    recency = max(0.0, 100 - days_since * 2)
    raw_score = max(0.0, min(100.0, recency - open_tickets * 20 + sales_count * 5))
    # thresholds apply to the unrounded score
    score = round(raw_score)
    if raw_score > 75:
        label = 'Saludable'
    elif raw_score > 40:
        label = 'Estable'
    else:
        label = 'En Riesgo'

    alerts = []
    if days_since > STALE_CONTACT_DAYS:
        alerts.append(f"No ha habido contacto en {int(days_since)} días.")
    if open_tickets > 0:
        alerts.append(f"Tiene {open_tickets} ticket(s) de soporte abiertos.")

    return {
        'score': score,
        'label': label,
        'days_since_last_activity': int(days_since),
        'open_tickets': open_tickets,
        'sales_count': sales_count,
        'lifetime_sales': lifetime_sales,
        'avg_ticket': (lifetime_sales / sales_count) if sales_count else Decimal('0'),
        'alerts': alerts,
    }


def convert_prospect_to_company(prospect, user=None):
    """Create an active client company (plus primary contact) from a prospect"""
    if prospect.company_id:
        raise PipelineError("El prospecto ya está vinculado a una empresa.")

    with transaction.atomic():
        company = Company.objects.create(
            name=prospect.name,
            industry=prospect.industry,
            stage='cliente_activo',
            priority=prospect.priority,
            owner=prospect.owner or user,
            website=prospect.website,
            phone=prospect.phone,
            email=prospect.email,
        )
        if prospect.contact_name or prospect.email or prospect.phone:
            contact = Contact.objects.create(
                company=company,
                name=prospect.contact_name or prospect.name,
                email=prospect.email,
                phone=prospect.phone,
                is_primary=True,
                owner=prospect.owner or user,
            )
            company.primary_contact = contact
            company.save(update_fields=['primary_contact'])

        prospect.company = company
        prospect.save(update_fields=['company', 'updated_at'])
        if prospect.stage != 'ganado':
            move_prospect_stage(prospect, 'ganado', user=user)

        log_activity('sistema', f"Empresa creada desde el prospecto {prospect.name}", user=user,
                     company=company, prospect=prospect)

    logger.info(f"Prospect {prospect.id} converted to company {company.id}")
    return company
