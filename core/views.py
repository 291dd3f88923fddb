import logging

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.http import JsonResponse
from django.utils.crypto import constant_time_compare
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST

from .forms import LoginForm
from .http import BadRequest, read_json

logger = logging.getLogger(__name__)

ROLE_ADMIN = 'admin'
ROLE_BASIC = 'basic'


def get_users():
    admin_u, admin_p = settings.APP_ADMIN_USERNAME, settings.APP_ADMIN_PASSWORD
    basic_u, basic_p = settings.APP_BASIC_USERNAME, settings.APP_BASIC_PASSWORD
    if not (admin_u and admin_p and basic_u and basic_p):
        raise ImproperlyConfigured('Missing auth environment variables')
    return {
        admin_u: (admin_p, ROLE_ADMIN),
        basic_u: (basic_p, ROLE_BASIC),
    }


@csrf_exempt
@require_POST
def login(request):
    # The role is only an assertion the client keeps; nothing server side depends on it
    try:
        form = LoginForm(read_json(request))
    except BadRequest as e:
        return JsonResponse({'ok': False, 'error': e.message}, status=400)
    if not form.is_valid():
        return JsonResponse({'ok': False, 'error': 'Brukernavn og passord er påkrevd'}, status=400)

    username = form.cleaned_data['username']
    try:
        users = get_users()
    except ImproperlyConfigured as e:
        logger.error('Login error: %s', e)
        return JsonResponse(
            {'ok': False, 'error': 'Serverkonfigurasjon mangler eller intern feil'}, status=500
        )

    entry = users.get(username)
    if not entry or not constant_time_compare(entry[0], form.cleaned_data['password']):
        logger.info('Failed login for %r', username)
        return JsonResponse({'ok': False, 'error': 'Feil brukernavn eller passord'}, status=401)
    return JsonResponse({'ok': True, 'role': entry[1], 'username': username})


@require_GET
def health(request):
    return JsonResponse({
        'status': 'healthy',
        'llm_provider': settings.LLM_PROVIDER,
        'record_store': bool(settings.AIRTABLE_TOKEN and settings.AIRTABLE_BASE_ID),
        'image_host': bool(settings.CLOUDINARY_CLOUD_NAME and settings.CLOUDINARY_UPLOAD_PRESET),
    })
