from rest_framework import serializers

from .models import Company, CompanyBankAccount

UPPERCASE_FIELDS = ('code', 'gstin', 'pan', 'cin')


class CompanyBankAccountSerializer(serializers.ModelSerializer):
    class Meta:
        model = CompanyBankAccount
        fields = [
            'id',
            'bank_name',
            'branch_name',
            'account_number',
            'ifsc_code',
            'account_type',
            'account_holder_name',
            'current_balance',
            'is_primary',
            'is_active',
            'created_at',
        ]
        read_only_fields = ['created_at']

    def validate_ifsc_code(self, value: str) -> str:
        value = (value or '').strip().upper()
        if len(value) != 11:
            raise serializers.ValidationError("IFSC code must be 11 characters.")
        return value


class CompanySerializer(serializers.ModelSerializer):
    bank_accounts = CompanyBankAccountSerializer(many=True, read_only=True)

    class Meta:
        model = Company
        fields = [
            'id',
            'code',
            'name',
            'legal_name',
            'gstin',
            'pan',
            'cin',
            'iec_code',
            'registration_number',
            'tax_id',
            'registration_date',
            'email',
            'phone',
            'website',
            'address_line',
            'city',
            'state',
            'postal_code',
            'country',
            'currency_code',
            'timezone',
            'default_tax_rate',
            'status',
            'is_active',
            'bank_accounts',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['is_active', 'created_at', 'updated_at']

    def to_internal_value(self, data):
        if hasattr(data, 'copy'):
            data = data.copy()
            for key in UPPERCASE_FIELDS:
                if isinstance(data.get(key), str):
                    data[key] = data[key].strip().upper()
        return super().to_internal_value(data)


class CompanyListSerializer(serializers.ModelSerializer):
    class Meta:
        model = Company
        fields = ['id', 'code', 'name', 'city', 'status', 'is_active']
