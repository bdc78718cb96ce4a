from rest_framework.routers import DefaultRouter

from .api import SquadViewSet

router = DefaultRouter()
router.register(r"", SquadViewSet, basename="squad")

urlpatterns = router.urls
