from django.conf import settings as django_settings
from django.core.validators import RegexValidator
from django.db import models


company_code_validator = RegexValidator(r'^[A-Z0-9]{3,20}$', 'Company code must be 3-20 uppercase letters or digits.')
gstin_validator = RegexValidator(r'^[0-9]{2}[A-Z]{5}[0-9]{4}[A-Z][1-9A-Z]Z[0-9A-Z]$', 'Invalid GSTIN format.')
pan_validator = RegexValidator(r'^[A-Z]{5}[0-9]{4}[A-Z]$', 'Invalid PAN format.')
cin_validator = RegexValidator(r'^[LU][0-9]{5}[A-Z]{2}[0-9]{4}[A-Z]{3}[0-9]{6}$', 'Invalid CIN format.')
iec_validator = RegexValidator(r'^[0-9]{10}$', 'IEC code must be 10 digits.')


class Company(models.Model):
    """
    Tenant root. Every business record in the system belongs to exactly one company.
    """

    class Status(models.TextChoices):
        ACTIVE = 'active', 'Active'
        INACTIVE = 'inactive', 'Inactive'
        SUSPENDED = 'suspended', 'Suspended'
        PENDING_APPROVAL = 'pending_approval', 'Pending Approval'

    code = models.CharField(max_length=20, unique=True, validators=[company_code_validator])
    name = models.CharField(max_length=255)
    legal_name = models.CharField(max_length=255, blank=True)

    # Registration details
    gstin = models.CharField(max_length=15, blank=True, validators=[gstin_validator])
    pan = models.CharField(max_length=10, blank=True, validators=[pan_validator])
    cin = models.CharField(max_length=21, blank=True, validators=[cin_validator])
    iec_code = models.CharField(max_length=10, blank=True, validators=[iec_validator])
    registration_number = models.CharField(max_length=100, blank=True)
    tax_id = models.CharField(max_length=50, blank=True)
    registration_date = models.DateField(null=True, blank=True)

    # Contact & address
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=20, blank=True)
    website = models.URLField(blank=True)
    address_line = models.CharField(max_length=255, blank=True)
    city = models.CharField(max_length=100, blank=True)
    state = models.CharField(max_length=100, blank=True)
    postal_code = models.CharField(max_length=20, blank=True)
    country = models.CharField(max_length=100, default='India')

    currency_code = models.CharField(max_length=3, default='INR')
    timezone = models.CharField(max_length=64, default='Asia/Kolkata')
    default_tax_rate = models.DecimalField(max_digits=5, decimal_places=2, default=0)

    status = models.CharField(max_length=20, choices=Status.choices, default=Status.ACTIVE)
    is_active = models.BooleanField(default=True)
    created_by = models.ForeignKey(
        django_settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']
        verbose_name_plural = 'Companies'

    def __str__(self):
        return f"{self.code} - {self.name}"

    def save(self, *args, **kwargs):
        self.code = (self.code or '').strip().upper()
        for field in ('gstin', 'pan', 'cin'):
            setattr(self, field, (getattr(self, field) or '').strip().upper())
        super().save(*args, **kwargs)


class CompanyBankAccount(models.Model):
    class AccountType(models.TextChoices):
        CURRENT = 'current', 'Current'
        SAVINGS = 'savings', 'Savings'
        CASH_CREDIT = 'cc', 'Cash Credit'
        OVERDRAFT = 'od', 'Overdraft'

    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name='bank_accounts')
    bank_name = models.CharField(max_length=255)
    branch_name = models.CharField(max_length=255, blank=True)
    account_number = models.CharField(max_length=34)
    ifsc_code = models.CharField(max_length=11)
    account_type = models.CharField(max_length=10, choices=AccountType.choices, default=AccountType.CURRENT)
    account_holder_name = models.CharField(max_length=255)
    current_balance = models.DecimalField(max_digits=20, decimal_places=2, default=0)
    is_primary = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = ('company', 'account_number')
        ordering = ['-is_primary', 'bank_name']

    def __str__(self):
        return f"{self.bank_name} ({self.account_number[-4:]})"

    def save(self, *args, **kwargs):
        self.ifsc_code = (self.ifsc_code or '').strip().upper()
        super().save(*args, **kwargs)
        if self.is_primary:
            # A company keeps at most one primary account
            CompanyBankAccount.objects.filter(company=self.company, is_primary=True).exclude(pk=self.pk).update(is_primary=False)


class DocumentSequence(models.Model):
    """Per-company running counter backing generated document numbers."""

    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name='document_sequences')
    doc_type = models.CharField(max_length=20)
    period = models.CharField(max_length=8, blank=True)
    current_value = models.PositiveIntegerField(default=0)

    class Meta:
        unique_together = ('company', 'doc_type', 'period')

    def __str__(self):
        return f"{self.company_id}:{self.doc_type}:{self.period or '-'}={self.current_value}"
