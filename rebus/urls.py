from django.urls import path

from .views import check_rebus, progress

urlpatterns = [
    path('check-rebus', check_rebus, name='check_rebus'),
    path('progress', progress, name='progress'),
]
