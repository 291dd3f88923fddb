import json

from django.http import JsonResponse
from django.utils.cache import add_never_cache_headers

RATE_LIMITED_MESSAGE = 'For mange forespørsler. Vennligst vent litt.'


class BadRequest(Exception):
    def __init__(self, message, issues=None):
        super().__init__(message)
        self.message = message
        self.issues = issues or []


def read_json(request):
    """Decode a JSON object body or raise ``BadRequest``."""
    try:
        payload = json.loads(request.body.decode('utf-8') or '{}')
    except (UnicodeDecodeError, json.JSONDecodeError):
        raise BadRequest('Ugyldig JSON')
    if not isinstance(payload, dict):
        raise BadRequest('Forventet et JSON-objekt')
    return payload


def reject_unknown(payload, allowed):
    unknown = sorted(set(payload) - set(allowed))
    if unknown:
        raise BadRequest(
            'Ukjente felt i forespørselen',
            [{'path': key, 'message': 'Ukjent felt'} for key in unknown],
        )


def form_issues(form, field_names=None):
    """Flatten form errors to ``[{path, message}]`` using the JSON key names."""
    field_names = field_names or {}
    issues = []
    for field, errors in form.errors.items():
        path = '' if field == '__all__' else field_names.get(field, field)
        for message in errors:
            issues.append({'path': path, 'message': str(message)})
    return issues


def error_response(message, status, issues=None):
    body = {'error': message}
    if issues:
        body['issues'] = issues
    return JsonResponse(body, status=status)


def no_store(response):
    add_never_cache_headers(response)
    response['Pragma'] = 'no-cache'
    response['Expires'] = '0'
    return response
