import logging
import re

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.http import JsonResponse
from django.utils import timezone
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from core import llm
from core.airtable import AirtableError, AirtableTable
from core.http import (
    RATE_LIMITED_MESSAGE,
    BadRequest,
    error_response,
    form_issues,
    no_store,
    read_json,
    reject_unknown,
)
from core.media import MediaUploadError, decode_base64, upload_image
from core.ratelimit import RateLimitMixin

from .forms import FIELD_KEYS, JSON_KEYS, AnalyzeForm, IdeaForm, IdeaUpdateForm, from_json
from .schema import ARCHIVED_STAGE, FIELD_IDS, idea_from_record, to_fields

logger = logging.getLogger(__name__)

DEFAULT_MAX_RECORDS = 100
MAX_PAGE_SIZE = 100

_RE_RECORD_ID = re.compile(r'^rec[A-Za-z0-9]{14}$')

# Record store status -> our status, for writes
_WRITE_STATUS = {401: 500, 403: 500, 404: 404, 422: 400, 429: 503}

ANALYZE_SYSTEM = """Du er innovasjonsrådgiver for BAMA, Norges ledende grossist av frukt og grønt.
Du får enten tekst, bilde, eller begge. Gi en kort, konkret og forretningsrelevant vurdering.

Retningslinjer:
- Tittel: maks 8 ord
- Beskrivelse: 2–3 setninger
- Målgruppe: 1–2 setninger
- Behov/Problem: 1–2 setninger
- Verdiforslag: 1–2 setninger

Formater alltid som gyldig JSON:
{
  "title": "...",
  "description": "...",
  "targetAudience": "...",
  "needsProblem": "...",
  "valueProposition": "..."
}"""

ANALYSIS_KEYS = ['title', 'description', 'targetAudience', 'needsProblem', 'valueProposition']


def ideas_table():
    return AirtableTable.from_settings()


def _record_id(request):
    record_id = request.GET.get('id') or ''
    if not record_id:
        raise BadRequest('Record ID mangler')
    if not _RE_RECORD_ID.match(record_id):
        raise BadRequest('Ugyldig record ID')
    return record_id


def _write_error(e, action):
    if isinstance(e, ImproperlyConfigured):
        logger.error('Ideas %s: %s', action, e)
        return error_response('Databasen er ikke konfigurert', 500)
    if isinstance(e, MediaUploadError):
        logger.error('Ideas %s, image upload: %s', action, e)
        return error_response('Kunne ikke laste opp bilder', 503)
    logger.error('Ideas %s, Airtable error: %s %s', action, e.status, e.message)
    return error_response(f'Kunne ikke {action} idé: {e.message}', _WRITE_STATUS.get(e.status, 500))


def _upload_images(images):
    if len(images) > settings.IMAGE_MAX_FILES:
        raise BadRequest(f'Du kan maks laste opp {settings.IMAGE_MAX_FILES} bilder')
    urls = []
    for image in images:
        try:
            size = len(decode_base64(image['data']))
        except ValueError:
            raise BadRequest(f'Ugyldig bilde: {image["filename"]}')
        if size > settings.IMAGE_MAX_BYTES:
            raise BadRequest(f'Bildet er for stort: {image["filename"]}')
        urls.append(upload_image(image['data'], image['filename']))
    return urls


def _fields_from(form, created=None):
    data = form.provided()
    image_urls = list(data.get('image_urls') or [])
    image_urls += _upload_images(data.get('images_base64') or [])
    if len(image_urls) > settings.IMAGE_MAX_FILES:
        raise BadRequest(f'Du kan maks legge ved {settings.IMAGE_MAX_FILES} bilder')
    return to_fields(data, image_urls=image_urls, created=created)


@method_decorator(csrf_exempt, name='dispatch')
class IdeasView(RateLimitMixin, View):
    """``/api/ideas``: list, create, partial update and delete/archive ideas."""

    http_method_names = ['get', 'post', 'patch', 'delete']

    def get(self, request):
        try:
            requested = int(request.GET.get('max', DEFAULT_MAX_RECORDS))
        except (TypeError, ValueError):
            requested = DEFAULT_MAX_RECORDS
        max_records = max(1, requested)
        page_size = min(max_records, MAX_PAGE_SIZE)
        offset = request.GET.get('offset') or None

        try:
            data = ideas_table().list(
                max_records=max_records,
                page_size=page_size,
                offset=offset,
                by_field_id=True,
                fresh=True,
            )
        except ImproperlyConfigured as e:
            logger.error('GET ideas: %s', e)
            return no_store(error_response('Databasen er ikke konfigurert', 500))
        except AirtableError as e:
            logger.error('GET ideas error: %s', e)
            status = 503 if e.status >= 500 else e.status
            return no_store(error_response('Kunne ikke hente ideer fra database', status))

        data['ideas'] = [idea_from_record(r) for r in data.get('records') or []]
        return no_store(JsonResponse(data))

    def post(self, request):
        if self.is_rate_limited(request):
            return error_response(RATE_LIMITED_MESSAGE, 429)
        try:
            payload = read_json(request)
            reject_unknown(payload, JSON_KEYS)
            form = IdeaForm(from_json(payload))
            if not form.is_valid():
                raise BadRequest('Ugyldig data sendt inn', form_issues(form, FIELD_KEYS))
            fields = _fields_from(form, created=timezone.localdate())
            logger.info(
                'Sending idea to Airtable: %d fields, image=%s, title=%r',
                len(fields), FIELD_IDS['images'] in fields, fields[FIELD_IDS['title']],
            )
            record = ideas_table().create(fields, typecast=True)
        except BadRequest as e:
            return error_response(e.message, 400, e.issues)
        except (AirtableError, ImproperlyConfigured, MediaUploadError) as e:
            return _write_error(e, 'lagre')

        logger.info('Idea created: %s', record.get('id'))
        return JsonResponse({'id': record.get('id'), 'record': record}, status=201)

    def patch(self, request):
        try:
            record_id = _record_id(request)
            payload = read_json(request)
            reject_unknown(payload, JSON_KEYS)
            form = IdeaUpdateForm(from_json(payload))
            if not form.is_valid():
                raise BadRequest('Ugyldig data sendt inn', form_issues(form, FIELD_KEYS))
            fields = _fields_from(form)
            if not fields:
                raise BadRequest('Ingen felt å oppdatere')
            result = ideas_table().update(record_id, fields, typecast=True)
        except BadRequest as e:
            return error_response(e.message, 400, e.issues)
        except (AirtableError, ImproperlyConfigured, MediaUploadError) as e:
            return _write_error(e, 'oppdatere')
        return JsonResponse(result)

    def delete(self, request):
        archive = request.GET.get('archive') == 'true'
        try:
            record_id = _record_id(request)
            if archive:
                result = ideas_table().update(
                    record_id, {FIELD_IDS['stage']: ARCHIVED_STAGE}, typecast=True
                )
                logger.info('Idea archived: %s', record_id)
                return JsonResponse(result)
            ideas_table().delete(record_id)
        except BadRequest as e:
            return error_response(e.message, 400)
        except (AirtableError, ImproperlyConfigured) as e:
            return _write_error(e, 'slette')
        logger.info('Idea deleted: %s', record_id)
        return JsonResponse({'success': True, 'deleted': True})


@method_decorator(csrf_exempt, name='dispatch')
class AIAnalyzeView(RateLimitMixin, View):
    """Suggest idea fields from a comment and/or an image."""

    http_method_names = ['post']

    def post(self, request):
        if not settings.AI_ANALYZE_ENABLED:
            return error_response('AI er skrudd av i dette miljøet', 503)
        if self.is_rate_limited(request):
            return error_response('For mange forespørsler. Prøv igjen om litt.', 429)

        try:
            payload = read_json(request)
            reject_unknown(payload, ['comment', 'imageDataUrl', 'imageUrl'])
        except BadRequest as e:
            return error_response(e.message, 400, e.issues)
        form = AnalyzeForm({
            'comment': payload.get('comment') or '',
            'image_data_url': payload.get('imageDataUrl') or '',
            'image_url': payload.get('imageUrl') or '',
        })
        if not form.is_valid():
            return error_response('Legg ved beskrivelse eller bilde', 400, form_issues(form, {
                'image_data_url': 'imageDataUrl', 'image_url': 'imageUrl',
            }))

        user_text = 'Analyser innholdet og foreslå felter.'
        if form.cleaned_data['comment']:
            user_text += f"\n\nBeskrivelse fra bruker: {form.cleaned_data['comment']}"

        try:
            raw = llm.complete(
                ANALYZE_SYSTEM, user_text,
                max_tokens=300, temperature=0.7, image=form.image, json_mode=True,
            )
        except ImproperlyConfigured as e:
            logger.error('AI analyze not configured: %s', e)
            return error_response('AI-tjenesten er ikke konfigurert', 500)
        except llm.LLMError as e:
            logger.error('AI analyze error: %s', e)
            if e.is_quota:
                return error_response(
                    'AI-kvoten er brukt opp i prosjektet. Aktiver billing eller øk grensen.', 429
                )
            if e.status == 429:
                return error_response('Litt mange forespørsler akkurat nå. Prøv igjen straks.', 429)
            return error_response('AI-analyse feilet', 500)

        try:
            analysis = llm.parse_json(raw)
        except ValueError:
            logger.error('Could not parse JSON from model: %s', raw[:300])
            return error_response('Kunne ikke tolke AI-responsen', 500)
        if not isinstance(analysis, dict) or not analysis.get('title') or not analysis.get('description'):
            logger.error('Incomplete AI response: %s', raw[:300])
            return error_response('Ufullstendig AI-respons', 500)

        return JsonResponse({
            'success': True,
            'analysis': {key: str(analysis.get(key) or '') for key in ANALYSIS_KEYS},
        })


@method_decorator(csrf_exempt, name='dispatch')
class ImageUploadView(RateLimitMixin, View):
    """Multipart upload of idea images to the image host; returns their URLs."""

    http_method_names = ['post']

    def post(self, request):
        if self.is_rate_limited(request):
            return error_response(RATE_LIMITED_MESSAGE, 429)
        files = request.FILES.getlist('files')
        if not files:
            return error_response('Ingen bilder lastet opp', 400)
        if len(files) > settings.IMAGE_MAX_FILES:
            return error_response(f'Du kan maks laste opp {settings.IMAGE_MAX_FILES} bilder', 400)
        for f in files:
            if not (f.content_type or '').startswith('image/'):
                return error_response(f'{f.name} er ikke et bilde', 400)
            if f.size > settings.IMAGE_MAX_BYTES:
                return error_response(f'{f.name} er for stort', 400)

        urls = []
        try:
            for f in files:
                urls.append(upload_image(f.read(), f.name))
        except ImproperlyConfigured as e:
            logger.error('Image upload: %s', e)
            return error_response('Bildeopplasting er ikke konfigurert', 500)
        except MediaUploadError as e:
            logger.error('Image upload failed: %s', e)
            return error_response('Kunne ikke laste opp bilder', 503)
        return JsonResponse({'urls': urls}, status=201)
