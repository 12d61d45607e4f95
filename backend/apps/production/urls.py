from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import CuttingPackingViewSet, DyeingViewSet, FinishingViewSet, PrintingViewSet, ProductionOrderViewSet

router = DefaultRouter()
router.register(r"production-orders", ProductionOrderViewSet, basename="production-orders")
router.register(r"production/dyeing", DyeingViewSet, basename="production-dyeing")
router.register(r"production/printing", PrintingViewSet, basename="production-printing")
router.register(r"production/finishing", FinishingViewSet, basename="production-finishing")
router.register(r"production/cutting-packing", CuttingPackingViewSet, basename="production-cutting-packing")

urlpatterns = [
    path("", include(router.urls)),
]
