from django.contrib.auth import get_user_model
from rest_framework import serializers

from .models import CompanyMembership

User = get_user_model()


class CompanyMembershipSerializer(serializers.ModelSerializer):
    company_code = serializers.CharField(source='company.code', read_only=True)
    company_name = serializers.CharField(source='company.name', read_only=True)

    class Meta:
        model = CompanyMembership
        fields = ('id', 'company', 'company_code', 'company_name', 'role', 'is_active', 'assigned_at')
        read_only_fields = ('assigned_at',)


class UserSerializer(serializers.ModelSerializer):
    memberships = CompanyMembershipSerializer(many=True, read_only=True)
    is_platform_admin = serializers.BooleanField(read_only=True)

    class Meta:
        model = User
        fields = (
            'id',
            'username',
            'email',
            'first_name',
            'last_name',
            'phone',
            'default_company',
            'is_active',
            'is_platform_admin',
            'date_joined',
            'last_login',
            'memberships',
        )
        read_only_fields = ('username', 'date_joined', 'last_login', 'is_active')

    def validate_default_company(self, company):
        user = self.instance
        if company is not None and user is not None and not user.has_company_access(company):
            raise serializers.ValidationError("You do not have access to this company.")
        return company


class UserCreateSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, min_length=8)
    role = serializers.ChoiceField(choices=CompanyMembership.Role.choices, write_only=True, default=CompanyMembership.Role.OPERATOR)

    class Meta:
        model = User
        fields = ('id', 'username', 'email', 'password', 'first_name', 'last_name', 'phone', 'role')

    def create(self, validated_data):
        ctx = self.context['ctx']
        role = validated_data.pop('role')
        user = User.objects.create_user(default_company=ctx.company, **validated_data)
        CompanyMembership.objects.create(user=user, company=ctx.company, role=role)
        return user
