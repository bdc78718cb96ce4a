from rest_framework.routers import SimpleRouter

from .api import GameViewSet

router = SimpleRouter()
router.register(r"", GameViewSet, basename="game")

urlpatterns = router.urls
