from django.conf import settings
from django.urls import path

from core.ratelimit import FixedWindowRateLimiter

from .views import AIAnalyzeView, IdeasView, ImageUploadView

submit_limiter = FixedWindowRateLimiter(settings.IDEAS_MAX_REQUESTS, settings.IDEAS_WINDOW_SECONDS)
upload_limiter = FixedWindowRateLimiter(settings.IDEAS_MAX_REQUESTS, settings.IDEAS_WINDOW_SECONDS)
ai_limiter = FixedWindowRateLimiter(settings.AI_MAX_REQ_PER_HOUR, 60 * 60)

for _limiter in (submit_limiter, upload_limiter, ai_limiter):
    _limiter.start_cleanup(settings.RATE_LIMIT_CLEANUP_SECONDS)

urlpatterns = [
    path('ideas', IdeasView.as_view(rate_limiter=submit_limiter), name='ideas'),
    path('ai-analyze', AIAnalyzeView.as_view(rate_limiter=ai_limiter), name='ai_analyze'),
    path('images', ImageUploadView.as_view(rate_limiter=upload_limiter), name='images'),
]
