"""
Candidate import from places datasets and the candidate review workflow.

A dataset is a JSON array of place objects (Apify Google Maps scraper
format): title, placeId, address, city, state, phone(s), emails, website,
url, categories/categoryName, totalScore, reviewsCount, imageUrls, location.
"""
import logging
from decimal import Decimal, InvalidOperation

import requests
from django.conf import settings
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from .models import Candidate, ImportHistory
from ori.core.cache_signals import suspend_cache_signals
from ori.core.utils import notify
from ori.crm.models import Prospect, Note, ActivityLog
from ori.crm.services import log_activity

logger = logging.getLogger(__name__)

MEXICAN_STATES = sorted([
    'Aguascalientes', 'Baja California', 'Baja California Sur', 'Campeche', 'Chiapas',
    'Chihuahua', 'Coahuila', 'Colima', 'Durango', 'Guanajuato', 'Guerrero', 'Hidalgo',
    'Jalisco', 'Estado de México', 'Michoacán', 'Morelos', 'Nayarit', 'Nuevo León', 'Oaxaca',
    'Puebla', 'Querétaro', 'Quintana Roo', 'San Luis Potosí', 'Sinaloa', 'Sonora',
    'Tabasco', 'Tamaulipas', 'Tlaxcala', 'Veracruz', 'Yucatán', 'Zacatecas',
    'Ciudad de México', 'CDMX',
])
MEXICO_CITY_NAMES = ('Mexico City', 'Ciudad de México')

PROSPECT_ORIGIN = 'Prospección IA'


class CandidateImportError(Exception):
    pass


class CandidateError(Exception):
    pass


def fetch_dataset(url, timeout=None):
    timeout = timeout or getattr(settings, 'PROSPECTING_IMPORT_TIMEOUT', 60)
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
        payload = response.json()
    except requests.exceptions.RequestException as e:
        raise CandidateImportError(f"No se pudo descargar el dataset: {str(e)}")
    except ValueError:
        raise CandidateImportError("El dataset no es un JSON válido.")
    if not isinstance(payload, list):
        raise CandidateImportError("El dataset debe ser una lista de resultados.")
    return payload


def get_place_id(raw):
    return raw.get('placeId') or raw.get('googlePlaceId') or None


def normalize_location(raw):
    """Return (city, state) with Mexico City collapsed to CDMX and state inferred from the address"""
    city = raw.get('city') or raw.get('City') or ''
    state = raw.get('state') or raw.get('State') or ''

    if city in MEXICO_CITY_NAMES:
        city = 'CDMX'
    if state in MEXICO_CITY_NAMES:
        state = 'CDMX'

    if not state and raw.get('address'):
        parts = [part.strip() for part in raw['address'].split(',')]
        if any(part in MEXICO_CITY_NAMES for part in parts):
            state = 'CDMX'
            city = 'CDMX'
        else:
            found = next((part for part in parts if part in MEXICAN_STATES), None)
            if found:
                state = found
                index = parts.index(found)
                if index > 0:
                    city = parts[index - 1]
    return city, state


def _decimal_or_none(value):
    if value in (None, ''):
        return None
    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    return number if number.is_finite() else None


def _count_or_zero(value):
    number = _decimal_or_none(value)
    if number is None or number < 0:
        return 0
    return int(number)


def build_candidate(raw, history, user, brand_id=None, tags=None):
    city, state = normalize_location(raw)
    phones = raw.get('phones') or []
    emails = raw.get('emails') or []
    location = raw.get('location') or {}
    categories = raw.get('categories') or ([raw['categoryName']] if raw.get('categoryName') else [])
    image_urls = raw.get('imageUrls') or ([raw['imageUrl']] if raw.get('imageUrl') else [])
    lat = _decimal_or_none(location.get('lat'))
    lng = _decimal_or_none(location.get('lng'))

    return Candidate(
        name=(raw.get('title') or 'Sin Nombre')[:255],
        google_place_id=get_place_id(raw),
        description=raw.get('description') or '',
        address=raw.get('address') or '',
        city=city[:120],
        state=state[:120],
        phone=raw.get('phone') or (phones[0] if phones else ''),
        phones=phones,
        email=emails[0] if emails else '',
        emails=emails,
        website=raw.get('website') or '',
        linkedins=raw.get('linkedIns') or [],
        facebooks=raw.get('facebooks') or [],
        instagrams=raw.get('instagrams') or [],
        twitters=raw.get('twitters') or [],
        google_maps_url=raw.get('url') or '',
        raw_categories=categories,
        tags=tags or [],
        average_rating=_decimal_or_none(raw.get('totalScore')) or Decimal('0'),
        reviews_count=_count_or_zero(raw.get('reviewsCount')),
        image_urls=image_urls,
        opening_hours=raw.get('openingHours') or [],
        lat=lat.quantize(Decimal('0.000001')) if lat is not None else None,
        lng=lng.quantize(Decimal('0.000001')) if lng is not None else None,
        status='pendiente',
        brand_id=brand_id,
        import_history=history,
        imported_by=user,
    )


def import_candidates(url, user, search_terms=None, location='', criteria=None, import_duplicates=None,
                      brand_associations=None, source=None):
    """
    Import a places dataset into candidates.

    Places whose placeId already exists are skipped unless listed in
    import_duplicates, in which case the existing candidate is refreshed.
    brand_associations maps placeId -> brand id and overrides criteria['brand'].
    """
    criteria = criteria or {}
    import_duplicates = set(import_duplicates or [])
    brand_associations = brand_associations or {}

    history = ImportHistory.objects.create(
        source=source,
        source_url=url,
        search_terms=search_terms or [],
        location=location or '',
        criteria=criteria,
        status='in_progress',
        imported_by=user,
    )

    try:
        places = fetch_dataset(url)
    except CandidateImportError as e:
        history.status = 'failed'
        history.error = str(e)
        history.finished_at = timezone.now()
        history.save(update_fields=['status', 'error', 'finished_at'])
        logger.error(f"Candidate import {history.id} failed: {str(e)}")
        raise

    existing = set(
        Candidate.objects.filter(google_place_id__isnull=False).values_list('google_place_id', flat=True)
    )
    new_count = 0
    skipped = 0
    seen = set()

    try:
        with transaction.atomic(), suspend_cache_signals():
            for raw in places:
                if not isinstance(raw, dict):
                    continue
                place_id = get_place_id(raw)
                brand_id = brand_associations.get(place_id) or criteria.get('brand') or None

                if place_id and (place_id in seen or place_id in existing):
                    if place_id in import_duplicates and place_id not in seen:
                        fresh = build_candidate(raw, history, user, brand_id=brand_id, tags=search_terms)
                        Candidate.objects.filter(google_place_id=place_id).update(**{
                            field: getattr(fresh, field)
                            for field in ('name', 'address', 'city', 'state', 'phone', 'phones', 'email', 'emails',
                                          'website', 'google_maps_url', 'raw_categories', 'average_rating',
                                          'reviews_count', 'image_urls', 'lat', 'lng', 'import_history')
                        })
                        new_count += 1
                    else:
                        skipped += 1
                    seen.add(place_id)
                    continue

                build_candidate(raw, history, user, brand_id=brand_id, tags=search_terms).save()
                new_count += 1
                if place_id:
                    seen.add(place_id)
    except Exception as e:
        history.status = 'failed'
        history.error = str(e)
        history.finished_at = timezone.now()
        history.save(update_fields=['status', 'error', 'finished_at'])
        logger.error(f"Candidate import {history.id} failed while saving: {str(e)}", exc_info=True)
        raise CandidateImportError(f"Error al guardar candidatos: {str(e)}")

    history.status = 'completed'
    history.total_processed = len(places)
    history.new_candidates = new_count
    history.duplicates_skipped = skipped
    history.finished_at = timezone.now()
    history.save(update_fields=['status', 'total_processed', 'new_candidates', 'duplicates_skipped', 'finished_at'])

    notify(
        user,
        'Importación Finalizada',
        f"La importación de {len(places)} candidatos ha finalizado.",
        type='system',
        link='/prospecting/history',
    )
    logger.info(f"Candidate import {history.id}: {new_count} new, {skipped} duplicates skipped")
    return history


def find_duplicates(places):
    """placeIds in a dataset that already exist as candidates, for review before importing"""
    place_ids = [get_place_id(raw) for raw in places if isinstance(raw, dict) and get_place_id(raw)]
    existing = Candidate.objects.filter(google_place_id__in=place_ids)
    return [{'place_id': c.google_place_id, 'candidate_id': c.id, 'name': c.name} for c in existing]


def approve_candidate(candidate, user):
    """Create a Nuevo Lead prospect from the candidate and mark it approved"""
    if candidate.status == 'aprobado':
        raise CandidateError("El candidato ya fue aprobado.")
    if candidate.status == 'lista_negra':
        raise CandidateError("El candidato está en la lista negra.")

    history_lines = [
        f"- {note.text} (por {note.user.get_display_name() if note.user else 'Desconocido'} el {note.created_at:%d/%m/%Y})"
        for note in Note.objects.filter(entity_type='candidate', entity_id=candidate.id).select_related('user')
    ]
    notes = "Prospecto creado desde Candidato.\n\n--- Historial de Notas del Candidato ---\n" + "\n".join(history_lines)
    analysis = candidate.ai_analysis or {}

    with transaction.atomic():
        prospect = Prospect.objects.create(
            name=candidate.name,
            stage='nuevo_lead',
            owner=user,
            created_by=user,
            est_value=Decimal('0'),
            origin=PROSPECT_ORIGIN,
            industry=analysis.get('suggested_category') or analysis.get('suggestedCategory') or '',
            candidate=candidate,
            website=candidate.website,
            phone=candidate.phone or (candidate.phones[0] if candidate.phones else ''),
            email=candidate.email or (candidate.emails[0] if candidate.emails else ''),
            address=candidate.address,
            notes=notes,
        )
        old_label = candidate.get_status_display()
        candidate.status = 'aprobado'
        candidate.prospect = prospect
        candidate.save(update_fields=['status', 'prospect', 'updated_at'])
        log_activity(
            'cambio_estado',
            f"cambió el estado de \"{old_label}\" a \"Aprobado y convertido en prospecto\"",
            user=user,
            candidate=candidate,
            prospect=prospect,
        )

    logger.info(f"Candidate {candidate.id} approved as prospect {prospect.id}")
    return prospect


def reject_candidate(candidate, user, reason, notes='', blacklist=False):
    if not reason:
        raise CandidateError("Se requiere un motivo.")
    old_label = candidate.get_status_display()
    if blacklist:
        candidate.status = 'lista_negra'
        candidate.blacklist_reason = reason
        candidate.blacklist_notes = notes or ''
        description = f"Añadido a Lista Negra (Motivo: {reason})"
        fields = ['status', 'blacklist_reason', 'blacklist_notes', 'updated_at']
    else:
        candidate.status = 'rechazado'
        candidate.rejection_reason = reason
        candidate.rejection_notes = notes or ''
        description = f"Rechazado (Motivo: {reason})"
        fields = ['status', 'rejection_reason', 'rejection_notes', 'updated_at']
    if notes:
        description += f" - {notes}"
    candidate.save(update_fields=fields)
    log_activity('cambio_estado', f"cambió el estado de \"{old_label}\" a \"{description}\"", user=user,
                 candidate=candidate)
    return candidate


def set_candidate_status(candidate, new_status, user):
    """Plain status change for states without side effects (Pendiente, En Revisión)"""
    if new_status not in ('pendiente', 'en_revision'):
        raise CandidateError(f"Usa el flujo dedicado para el estado {new_status}.")
    if candidate.status == new_status:
        return False
    old_label = candidate.get_status_display()
    candidate.status = new_status
    candidate.save(update_fields=['status', 'updated_at'])
    log_activity('cambio_estado', f"cambió el estado de \"{old_label}\" a \"{candidate.get_status_display()}\"",
                 user=user, candidate=candidate)
    return True


def record_profile_view(candidate, user):
    """Log one profile view per user; returns True when this is the user's first view"""
    if ActivityLog.objects.filter(candidate=candidate, user=user, type='vista_perfil').exists():
        return False
    log_activity('vista_perfil', 'vio el perfil', user=user, candidate=candidate)
    Candidate.objects.filter(pk=candidate.pk).update(profile_views=F('profile_views') + 1)
    candidate.refresh_from_db(fields=['profile_views'])
    return True
