from django import forms

from .progress import SLOTS


class CheckRebusForm(forms.Form):
    rebusId = forms.IntegerField()
    userAnswer = forms.CharField(max_length=500)


class ProgressForm(forms.Form):
    rebusId = forms.TypedChoiceField(choices=[(s, s) for s in SLOTS], coerce=int)
    solved = forms.BooleanField(required=False)
    scheduledDate = forms.DateField(required=False, input_formats=['%Y-%m-%d'])
    scheduledTime = forms.RegexField(
        regex=r'^\d{1,2}:\d{2}$', required=False,
        error_messages={'invalid': 'Tidspunkt må være på formen HH:MM'},
    )
