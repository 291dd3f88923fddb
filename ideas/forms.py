from django import forms
from django.core.validators import URLValidator

from .schema import STAGE_CHOICES, TYPE_CHOICES, normalize_stage

# JSON body key -> form field name
JSON_KEYS = {
    'title': 'title',
    'description': 'description',
    'type': 'type',
    'stage': 'stage',
    'submitter': 'submitter',
    'targetAudience': 'target_audience',
    'needsProblem': 'needs_problem',
    'valueProposition': 'value_proposition',
    'strategicFit': 'strategic_fit',
    'consumerNeed': 'consumer_need',
    'businessPotential': 'business_potential',
    'feasibility': 'feasibility',
    'launchTime': 'launch_time',
    'imageUrl': 'image_url',
    'imageUrls': 'image_urls',
    'imageBase64': 'image_base64',
    'imageFilename': 'image_filename',
    'imagesBase64': 'images_base64',
}
FIELD_KEYS = {v: k for k, v in JSON_KEYS.items()}


def from_json(payload):
    """Rename JSON keys to form fields, dropping empty values and unknown stages."""
    data = {}
    for key, value in payload.items():
        if value in ('', None) or key not in JSON_KEYS:
            continue
        data[JSON_KEYS[key]] = value
    if 'stage' in data:
        stage = normalize_stage(data['stage'])
        if stage:
            data['stage'] = stage
        else:
            del data['stage']
    return data


class URLListField(forms.Field):
    default_error_messages = {
        'invalid_list': 'Forventet en liste med URL-er.',
        'invalid_url': 'Ugyldig URL: %(value)s',
    }

    def to_python(self, value):
        if value in self.empty_values:
            return []
        if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
            raise forms.ValidationError(self.error_messages['invalid_list'], code='invalid_list')
        return [v.strip() for v in value if v.strip()]

    def validate(self, value):
        super().validate(value)
        check = URLValidator(schemes=['http', 'https'])
        for url in value:
            try:
                check(url)
            except forms.ValidationError:
                raise forms.ValidationError(
                    self.error_messages['invalid_url'], code='invalid_url', params={'value': url}
                )


class Base64ImageListField(forms.Field):
    """List of ``{"filename": ..., "data": <base64>}`` objects."""

    default_error_messages = {
        'invalid': 'Forventet en liste med bilder ({filename, data}).',
    }

    def to_python(self, value):
        if value in self.empty_values:
            return []
        if not isinstance(value, (list, tuple)):
            raise forms.ValidationError(self.error_messages['invalid'], code='invalid')
        images = []
        for item in value:
            if not isinstance(item, dict) or not isinstance(item.get('data'), str) or not item['data']:
                raise forms.ValidationError(self.error_messages['invalid'], code='invalid')
            images.append({'filename': str(item.get('filename') or 'bilde.jpg'), 'data': item['data']})
        return images


def _rating():
    return forms.IntegerField(min_value=1, max_value=5, required=False)


class IdeaForm(forms.Form):
    title = forms.CharField(min_length=2, max_length=200, error_messages={
        'min_length': 'Tittel må være minst 2 tegn',
        'required': 'Tittel er påkrevd',
    })
    description = forms.CharField(required=False)
    type = forms.ChoiceField(choices=TYPE_CHOICES, required=False, error_messages={
        'invalid_choice': 'Ugyldig type',
    })
    stage = forms.ChoiceField(choices=STAGE_CHOICES, required=False)
    submitter = forms.CharField(required=False, max_length=200)
    target_audience = forms.CharField(required=False)
    needs_problem = forms.CharField(required=False)
    value_proposition = forms.CharField(required=False)

    strategic_fit = _rating()
    consumer_need = _rating()
    business_potential = _rating()
    feasibility = _rating()
    launch_time = _rating()

    image_url = forms.URLField(required=False, assume_scheme='https')
    image_urls = URLListField(required=False)
    image_base64 = forms.CharField(required=False, strip=False)
    image_filename = forms.CharField(required=False, max_length=255)
    images_base64 = Base64ImageListField(required=False)

    def clean(self):
        data = super().clean()
        urls = list(data.get('image_urls') or [])
        if data.get('image_url'):
            urls.insert(0, data['image_url'])
        data['image_urls'] = urls

        uploads = list(data.get('images_base64') or [])
        if data.get('image_base64'):
            uploads.insert(0, {
                'filename': data.get('image_filename') or 'bilde.jpg',
                'data': data['image_base64'],
            })
        data['images_base64'] = uploads
        return data

    def provided(self):
        """Cleaned values for the fields the client actually sent."""
        out = {k: v for k, v in self.cleaned_data.items() if k in self.data}
        for name in ('image_urls', 'images_base64'):
            if self.cleaned_data.get(name):
                out[name] = self.cleaned_data[name]
        return out


class IdeaUpdateForm(IdeaForm):
    """Same rules as ``IdeaForm`` with every field optional."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        for field in self.fields.values():
            field.required = False


class AnalyzeForm(forms.Form):
    comment = forms.CharField(required=False, max_length=4000)
    image_data_url = forms.CharField(required=False, strip=False)
    image_url = forms.URLField(required=False, assume_scheme='https')

    def clean_image_data_url(self):
        value = self.cleaned_data.get('image_data_url') or ''
        if value and not value.startswith('data:image/'):
            raise forms.ValidationError('Bildet må være en data-URL (data:image/...)')
        return value

    def clean(self):
        data = super().clean()
        if not data.get('comment') and not (data.get('image_data_url') or data.get('image_url')):
            raise forms.ValidationError('Legg ved beskrivelse eller bilde')
        return data

    @property
    def image(self):
        return self.cleaned_data.get('image_data_url') or self.cleaned_data.get('image_url') or None

