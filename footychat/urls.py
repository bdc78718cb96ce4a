"""
URL configuration for footychat project.

Every REST endpoint lives under ``/api/``; websocket routes are declared in
``chat.routing``.
"""
from django.contrib import admin
from django.urls import include, path

from footychat.views import health

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/health/', health, name='health'),
    path('api/users/', include('notifications.urls')),
    path('api/users/', include('players.urls')),
    path('api/groups/', include('chat.urls')),
    path('api/groups/', include('squads.urls')),
    path('api/fields/', include('venues.urls')),
    path('api/games/', include('games.urls')),
    path('api/messages/', include('chat.message_urls')),
]
