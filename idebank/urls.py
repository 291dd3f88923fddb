from django.urls import include, path

from core.views import health, login

urlpatterns = [
    path('api/health', health, name='health'),
    path('api/auth/login', login, name='login'),
    path('api/', include('ideas.urls')),
    path('api/', include('rebus.urls')),
]
