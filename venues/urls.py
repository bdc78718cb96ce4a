from rest_framework.routers import SimpleRouter

from .api import VenueViewSet

router = SimpleRouter()
router.register(r"", VenueViewSet, basename="venue")

urlpatterns = router.urls
