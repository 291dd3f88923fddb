import logging

from django.core.exceptions import ImproperlyConfigured
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods, require_POST

from core.airtable import AirtableError
from core.http import BadRequest, error_response, form_issues, no_store, read_json, reject_unknown

from .catalog import get_puzzle
from .evaluator import evaluate
from .feedback import compose
from .forms import CheckRebusForm, ProgressForm
from .progress import ProgressStore, progress_table

logger = logging.getLogger(__name__)


@csrf_exempt
@require_POST
def check_rebus(request):
    try:
        payload = read_json(request)
        reject_unknown(payload, ['rebusId', 'userAnswer'])
    except BadRequest as e:
        return error_response(e.message, 400, e.issues)
    form = CheckRebusForm(payload)
    if not form.is_valid():
        return error_response('Missing rebusId or userAnswer', 400, form_issues(form))

    puzzle = get_puzzle(form.cleaned_data['rebusId'])
    if puzzle is None:
        return error_response('Invalid rebusId', 400)

    guess = form.cleaned_data['userAnswer']
    result = evaluate(puzzle, guess)
    logger.debug(
        'Rebus %s: %d/%d found, %d near, %d stray',
        puzzle.id, result.found, result.total, len(result.near_misses), len(result.stray_tokens),
    )
    message = compose(puzzle, result, guess)
    if result.solved:
        return JsonResponse({'correct': True, 'message': message})
    return JsonResponse({
        'correct': False,
        'message': message,
        'progress': {'found': result.found, 'total': result.total},
    })


@csrf_exempt
@require_http_methods(['GET', 'POST'])
def progress(request):
    try:
        store = ProgressStore(progress_table())
    except ImproperlyConfigured as e:
        logger.error('Progress store: %s', e)
        return no_store(error_response('Airtable not configured', 500))

    if request.method == 'GET':
        try:
            slots = store.get()
        except AirtableError as e:
            logger.error('Error fetching progress: %s', e)
            return no_store(error_response('Failed to fetch progress', 503))
        return no_store(JsonResponse({'rebuses': [s.as_json() for s in slots]}))

    try:
        payload = read_json(request)
        reject_unknown(payload, ProgressForm.base_fields)
    except BadRequest as e:
        return error_response(e.message, 400, e.issues)
    form = ProgressForm(payload)
    if not form.is_valid():
        return error_response('Invalid progress data', 400, form_issues(form))

    data = form.cleaned_data
    try:
        store.set(
            data['rebusId'],
            data['solved'],
            scheduled_date=data['scheduledDate'].isoformat() if data['scheduledDate'] else None,
            scheduled_time=data['scheduledTime'] or None,
        )
    except AirtableError as e:
        logger.error('Error saving progress: %s', e)
        return error_response('Failed to save progress', 500)
    return JsonResponse({'success': True})
