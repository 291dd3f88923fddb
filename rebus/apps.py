from django.apps import AppConfig


class RebusConfig(AppConfig):
    name = 'rebus'
    verbose_name = 'Julerebus'
