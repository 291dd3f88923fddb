"""Image uploads to Cloudinary (unsigned upload preset)."""

import base64
import logging

import requests
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

logger = logging.getLogger(__name__)

CLOUDINARY_UPLOAD_URL = 'https://api.cloudinary.com/v1_1/{cloud}/image/upload'


class MediaUploadError(Exception):
    pass


def as_data_url(data, mime='image/jpeg'):
    """Accept raw base64 (as the idea forms send it) or a full data URL."""
    if data.startswith('data:'):
        return data
    return f'data:{mime};base64,{data}'


def upload_image(data, filename, session=None):
    """Upload ``data`` (bytes, or a base64/data-URL string) and return its https URL."""
    cloud = settings.CLOUDINARY_CLOUD_NAME
    preset = settings.CLOUDINARY_UPLOAD_PRESET
    if not cloud or not preset:
        raise ImproperlyConfigured('Cloudinary is not configured')

    url = CLOUDINARY_UPLOAD_URL.format(cloud=cloud)
    form = {'upload_preset': preset}
    files = None
    if isinstance(data, bytes):
        files = {'file': (filename, data)}
    else:
        form['file'] = as_data_url(data)

    logger.debug('Uploading %s to Cloudinary', filename)
    try:
        resp = (session or requests).post(url, data=form, files=files, timeout=settings.IMAGE_UPLOAD_TIMEOUT)
    except requests.RequestException as e:
        raise MediaUploadError(f'Could not reach image host: {e}')
    if not resp.ok:
        logger.error('Cloudinary upload error %s: %s', resp.status_code, resp.text[:300])
        raise MediaUploadError(f'Image upload failed ({resp.status_code})')
    secure_url = resp.json().get('secure_url')
    if not secure_url:
        raise MediaUploadError('Image host returned no URL')
    return secure_url


def decode_base64(data):
    """Bytes of a base64 string or data URL; used to size-check before uploading."""
    payload = data.split(',', 1)[1] if data.startswith('data:') else data
    return base64.b64decode(payload, validate=False)
