"""Squad chat history, mounted under ``/api/groups/``."""

from django.urls import path

from .api import SquadMessageViewSet

messages = SquadMessageViewSet.as_view({"get": "list", "post": "create"})
pinned = SquadMessageViewSet.as_view({"get": "pinned"})
stats = SquadMessageViewSet.as_view({"get": "stats"})

urlpatterns = [
    path("<int:squad_pk>/messages/", messages, name="squad-messages"),
    path("<int:squad_pk>/messages/pinned/", pinned, name="squad-messages-pinned"),
    path("<int:squad_pk>/messages/stats/", stats, name="squad-messages-stats"),
]
