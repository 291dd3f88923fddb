"""Text generation through OpenAI, Google Gemini or AWS Bedrock."""

import base64
import json
import logging
import re

import boto3
import google.generativeai as genai
import openai
import requests
from botocore.exceptions import BotoCoreError, ClientError
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from google.api_core import exceptions as google_exceptions
from openai import OpenAI

logger = logging.getLogger(__name__)

PROVIDERS = ('openai', 'gemini', 'bedrock')

_RE_DATA_URL = re.compile(r'^data:(?P<mime>[\w/+.-]+);base64,(?P<data>.+)$', re.DOTALL)
_RE_CODE_FENCE = re.compile(r'```(?:json)?\s*|\s*```')


class LLMError(Exception):
    """A provider call failed. ``status``/``code`` mirror the provider's error when known."""

    def __init__(self, message, status=None, code=None):
        super().__init__(message)
        self.status = status
        self.code = code

    @property
    def is_quota(self):
        return self.status == 429 and self.code == 'insufficient_quota'


def get_client(provider):
    """Get client for the specified provider."""
    if provider == 'openai':
        if not settings.OPENAI_API_KEY:
            raise ImproperlyConfigured('OPENAI_API_KEY is not set')
        return OpenAI(api_key=settings.OPENAI_API_KEY, timeout=settings.LLM_TIMEOUT)
    elif provider == 'gemini':
        if not settings.GEMINI_API_KEY:
            raise ImproperlyConfigured('GEMINI_API_KEY is not set')
        genai.configure(api_key=settings.GEMINI_API_KEY)
        return genai.GenerativeModel(settings.GEMINI_MODEL_ID)
    elif provider == 'bedrock':
        return boto3.client('bedrock-runtime', region_name=settings.AWS_REGION_NAME)
    else:
        raise ImproperlyConfigured(f'Unsupported LLM provider: {provider}')


def load_image(source):
    """Return ``(mime_type, bytes)`` for a data URL or a plain http(s) URL."""
    match = _RE_DATA_URL.match(source or '')
    if match:
        try:
            return match.group('mime'), base64.b64decode(match.group('data'))
        except ValueError as e:
            raise LLMError(f'Invalid image data: {e}', status=400)
    try:
        resp = requests.get(source, timeout=settings.LLM_TIMEOUT)
        resp.raise_for_status()
    except requests.RequestException as e:
        raise LLMError(f'Could not fetch image: {e}', status=400)
    mime = (resp.headers.get('Content-Type') or 'image/jpeg').split(';')[0]
    return mime, resp.content


def _openai_complete(system, user, max_tokens, temperature, image, json_mode):
    client = get_client('openai')
    content = user
    if image:
        content = [
            {'type': 'text', 'text': user},
            {'type': 'image_url', 'image_url': {'url': image, 'detail': 'low'}},
        ]
    kwargs = {}
    if json_mode:
        kwargs['response_format'] = {'type': 'json_object'}
    logger.debug('Sending prompt to OpenAI (%s), image=%s', settings.OPENAI_MODEL_ID, bool(image))
    try:
        response = client.chat.completions.create(
            model=settings.OPENAI_MODEL_ID,
            messages=[
                {'role': 'system', 'content': system},
                {'role': 'user', 'content': content},
            ],
            max_tokens=max_tokens,
            temperature=temperature,
            **kwargs
        )
    except openai.APIStatusError as e:
        raise LLMError(f'OpenAI API error: {e}', status=e.status_code, code=getattr(e, 'code', None))
    except openai.OpenAIError as e:
        raise LLMError(f'OpenAI API error: {e}')
    if response.usage:
        logger.debug('OpenAI tokens used: %s', response.usage.total_tokens)
    return response.choices[0].message.content if response.choices else ''


def _gemini_complete(system, user, max_tokens, temperature, image, json_mode):
    client = get_client('gemini')
    prompt = system + '\n\n' + user
    parts = [prompt]
    if image:
        mime, data = load_image(image)
        parts.append({'mime_type': mime, 'data': data})
    config = {'max_output_tokens': max_tokens, 'temperature': temperature}
    if json_mode:
        config['response_mime_type'] = 'application/json'
    logger.debug('Sending prompt to Gemini (%s): %s', settings.GEMINI_MODEL_ID, prompt[:100])
    try:
        response = client.generate_content(parts, generation_config=config)
        return response.text
    except google_exceptions.ResourceExhausted as e:
        raise LLMError(f'Gemini API error: {e}', status=429)
    except google_exceptions.GoogleAPICallError as e:
        raise LLMError(f'Gemini API error: {e}', status=getattr(e, 'code', None))
    except ValueError as e:
        # response.text raises when the candidate was blocked
        raise LLMError(f'Gemini returned no text: {e}')


def _bedrock_complete(system, user, max_tokens, temperature, image, json_mode):
    client = get_client('bedrock')
    content = [{'text': user}]
    if image:
        mime, data = load_image(image)
        fmt = mime.split('/')[-1].replace('jpg', 'jpeg')
        content.append({'image': {'format': fmt, 'source': {'bytes': data}}})
    logger.debug(
        'Sending messages to Bedrock (%s, region=%s)',
        settings.BEDROCK_MODEL_ID,
        settings.AWS_REGION_NAME,
    )
    try:
        response = client.converse(
            modelId=settings.BEDROCK_MODEL_ID,
            messages=[{'role': 'user', 'content': content}],
            system=[{'text': system}],
            inferenceConfig={'maxTokens': max_tokens, 'temperature': temperature},
        )
    except ClientError as e:
        code = e.response.get('Error', {}).get('Code')
        status = 429 if code == 'ThrottlingException' else e.response.get('ResponseMetadata', {}).get('HTTPStatusCode')
        if code == 'AccessDeniedException':
            logger.error(
                'Access denied invoking Bedrock modelId=%s in region=%s. '
                'Ensure model access is enabled and the IAM principal has bedrock:InvokeModel.',
                settings.BEDROCK_MODEL_ID,
                settings.AWS_REGION_NAME,
            )
        raise LLMError(f'Bedrock error: {code}', status=status, code=code)
    except BotoCoreError as e:
        raise LLMError(f'Bedrock error: {e}')
    # content is empty when a guardrail intervenes
    content = response.get('output', {}).get('message', {}).get('content') or []
    text = next((c['text'] for c in content if 'text' in c), '')
    if not text:
        logger.warning('Bedrock returned no text, stopReason=%s', response.get('stopReason'))
    return text


_DISPATCH = {
    'openai': _openai_complete,
    'gemini': _gemini_complete,
    'bedrock': _bedrock_complete,
}


def complete(system, user, provider=None, max_tokens=300, temperature=0.7, image=None, json_mode=False):
    """Run one completion and return the raw text.

    ``image`` is a data URL or an http(s) URL. Raises ``LLMError`` on provider
    failures and ``ImproperlyConfigured`` when credentials are missing.
    """
    provider = (provider or settings.LLM_PROVIDER).lower()
    fn = _DISPATCH.get(provider)
    if fn is None:
        raise ImproperlyConfigured(f'Unsupported LLM provider: {provider}')
    text = fn(system, user, max_tokens, temperature, image, json_mode)
    return (text or '').strip()


def parse_json(raw):
    """Parse a JSON object from model output, tolerating code fences and chatter."""
    clean = _RE_CODE_FENCE.sub('', raw or '').strip()
    try:
        return json.loads(clean)
    except json.JSONDecodeError:
        start = clean.find('{')
        end = clean.rfind('}') + 1
        if start >= 0 and end > start:
            return json.loads(clean[start:end])
        raise
