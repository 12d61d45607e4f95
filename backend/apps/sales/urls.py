from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import CustomerOrderViewSet, CustomerViewSet

router = DefaultRouter()
router.register(r"customers", CustomerViewSet, basename="customers")
router.register(r"customer-orders", CustomerOrderViewSet, basename="customer-orders")

urlpatterns = [
    path("", include(router.urls)),
]
