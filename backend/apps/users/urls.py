from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import ChangePasswordView, CompanyUserViewSet, CurrentUserProfileView

router = DefaultRouter()
router.register(r'users', CompanyUserViewSet, basename='company-users')

urlpatterns = [
    path('users/me/', CurrentUserProfileView.as_view(), name='user-profile'),
    path('users/change-password/', ChangePasswordView.as_view(), name='change-password'),
    path('', include(router.urls)),
]
