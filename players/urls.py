from rest_framework.routers import DefaultRouter

from .api import PlayerViewSet

router = DefaultRouter()
router.register(r"", PlayerViewSet, basename="player")

urlpatterns = router.urls
