from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import CategoryViewSet, InventoryItemViewSet, StockMovementViewSet

router = DefaultRouter()
router.register(r"categories", CategoryViewSet, basename="categories")
router.register(r"inventory-items", InventoryItemViewSet, basename="inventory-items")
router.register(r"stock-movements", StockMovementViewSet, basename="stock-movements")

urlpatterns = [
    path("", include(router.urls)),
]
