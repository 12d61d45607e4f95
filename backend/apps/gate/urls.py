from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import GatePassViewSet, VehicleViewSet

router = DefaultRouter()
router.register(r"gate-passes", GatePassViewSet, basename="gate-passes")
router.register(r"vehicles", VehicleViewSet, basename="vehicles")

urlpatterns = [
    path("", include(router.urls)),
]
