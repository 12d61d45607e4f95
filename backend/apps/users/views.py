from django.contrib.auth import get_user_model
from rest_framework import filters, generics, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView

from shared.exceptions import ValidationFailed
from shared.responses import success_response
from shared.views import (
    CompanyScopedMixin,
    EnvelopeCreateModelMixin,
    EnvelopeListModelMixin,
    EnvelopeRetrieveModelMixin,
)

from .serializers import UserCreateSerializer, UserSerializer

User = get_user_model()


class CurrentUserProfileView(generics.RetrieveUpdateAPIView):
    serializer_class = UserSerializer
    permission_classes = [IsAuthenticated]

    def get_object(self):
        return self.request.user

    def retrieve(self, request, *args, **kwargs):
        return success_response(self.get_serializer(self.get_object()).data)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        serializer = self.get_serializer(self.get_object(), data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return success_response(serializer.data, "Profile updated successfully")


class ChangePasswordView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        user = request.user
        old_password = request.data.get('old_password')
        new_password = request.data.get('new_password') or ''

        if not user.check_password(old_password):
            raise ValidationFailed('Current password is incorrect.')
        if len(new_password) < 8:
            raise ValidationFailed('New password must be at least 8 characters long.')

        user.set_password(new_password)
        user.save(update_fields=['password'])
        return success_response(None, 'Password updated successfully')


class CompanyUserViewSet(
    CompanyScopedMixin,
    EnvelopeListModelMixin,
    EnvelopeRetrieveModelMixin,
    EnvelopeCreateModelMixin,
    viewsets.GenericViewSet,
):
    """Users holding a membership in the active company; company admins add new users."""

    queryset = User.objects.prefetch_related('memberships__company').order_by('first_name', 'last_name', 'username')
    filter_backends = [filters.SearchFilter]
    search_fields = ['username', 'first_name', 'last_name', 'email']
    entity_label = 'User'

    def get_queryset(self):
        if getattr(self, 'swagger_fake_view', False):
            return User.objects.none()
        company = self.get_context().company
        return self.queryset.filter(memberships__company=company, memberships__is_active=True).distinct()

    def get_serializer_class(self):
        if self.action == 'create':
            return UserCreateSerializer
        return UserSerializer

    def perform_create(self, serializer):
        self.require_admin()
        user = serializer.save()
        self.audit(user, 'CREATE', f'User {user.username} added to company.')

    @action(detail=True, methods=['post'])
    def deactivate(self, request, pk=None):
        self.require_admin()
        user = self.get_object()
        user.memberships.filter(company=self.get_context().company).update(is_active=False)
        self.audit(user, 'UPDATE', f'User {user.username} removed from company.')
        return success_response(None, 'User deactivated for this company')
