from django.urls import include, path
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

urlpatterns = [
    path('auth/token/', TokenObtainPairView.as_view(), name='token-obtain-pair'),
    path('auth/token/refresh/', TokenRefreshView.as_view(), name='token-refresh'),
    path('', include('apps.companies.urls')),
    path('', include('apps.users.urls')),
    path('', include('apps.audit.urls')),
    path('', include('apps.inventory.urls')),
    path('', include('apps.sales.urls')),
    path('', include('apps.procurement.urls')),
    path('', include('apps.finance.urls')),
    path('', include('apps.production.urls')),
    path('', include('apps.gate.urls')),
    path('', include('apps.reports.urls')),
]
