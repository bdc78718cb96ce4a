"""Single-message endpoints, mounted under ``/api/messages/``."""

from rest_framework.routers import SimpleRouter

from .api import MessageViewSet

router = SimpleRouter()
router.register(r"", MessageViewSet, basename="message")

urlpatterns = router.urls
