from decimal import Decimal
import uuid

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

import donations.managers


RATE_VALIDATORS = [
    django.core.validators.MinValueValidator(Decimal('0')),
    django.core.validators.MaxValueValidator(Decimal('100')),
]

HEX_COLOR_VALIDATOR = django.core.validators.RegexValidator(
    message='Warna harus dalam format hex, contoh #2563eb', regex='^#[0-9A-Fa-f]{6}$'
)


def timestamps():
    return [
        ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, help_text='When this record was created')),
        ('updated_at', models.DateTimeField(auto_now=True, help_text='When this record was last updated')),
    ]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('auth', '0012_alter_user_first_name_max_length'),
    ]

    operations = [
        migrations.CreateModel(
            name='Branch',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                *timestamps(),
                ('name', models.CharField(max_length=255)),
                ('code', models.CharField(help_text='Unique branch code', max_length=50, unique=True)),
                ('address', models.TextField()),
            ],
            options={
                'verbose_name_plural': 'Branches',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Team',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                *timestamps(),
                ('name', models.CharField(max_length=255)),
                ('code', models.CharField(max_length=50, unique=True)),
                ('branch', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='teams', to='donations.branch')),
            ],
            options={
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='User',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('password', models.CharField(max_length=128, verbose_name='password')),
                ('last_login', models.DateTimeField(blank=True, null=True, verbose_name='last login')),
                ('is_superuser', models.BooleanField(default=False, help_text='Designates that this user has all permissions without explicitly assigning them.', verbose_name='superuser status')),
                ('is_staff', models.BooleanField(default=False, help_text='Designates whether the user can log into this admin site.', verbose_name='staff status')),
                ('is_active', models.BooleanField(default=True, help_text='Designates whether this user should be treated as active. Unselect this instead of deleting accounts.', verbose_name='active')),
                ('date_joined', models.DateTimeField(default=django.utils.timezone.now, verbose_name='date joined')),
                ('email', models.EmailField(max_length=254, unique=True)),
                ('name', models.CharField(max_length=255)),
                ('phone', models.CharField(blank=True, max_length=20)),
                ('role', models.CharField(choices=[('admin', 'Admin'), ('validator', 'Validator'), ('volunteer', 'Relawan'), ('branch', 'Cabang')], db_index=True, default='volunteer', max_length=20)),
                ('branch', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='users', to='donations.branch')),
                ('team', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='users', to='donations.team')),
                ('groups', models.ManyToManyField(blank=True, help_text='The groups this user belongs to. A user will get all permissions granted to each of their groups.', related_name='user_set', related_query_name='user', to='auth.group', verbose_name='groups')),
                ('user_permissions', models.ManyToManyField(blank=True, help_text='Specific permissions for this user.', related_name='user_set', related_query_name='user', to='auth.permission', verbose_name='user permissions')),
            ],
            options={
                'ordering': ['name'],
                'indexes': [models.Index(fields=['branch', 'role'], name='donations_u_branch__5d3f2a_idx')],
            },
            managers=[
                ('objects', donations.managers.UserManager()),
            ],
        ),
        migrations.CreateModel(
            name='Program',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                *timestamps(),
                ('type', models.CharField(choices=[('ZISWAF', 'ZISWAF'), ('QURBAN', 'Qurban')], db_index=True, max_length=10)),
                ('name', models.CharField(max_length=255)),
                ('code', models.CharField(max_length=50, unique=True)),
                ('description', models.TextField(blank=True)),
                ('volunteer_rate', models.DecimalField(decimal_places=2, help_text='Volunteer commission (percent)', max_digits=5, validators=RATE_VALIDATORS)),
                ('branch_rate', models.DecimalField(decimal_places=2, help_text='Branch commission (percent)', max_digits=5, validators=RATE_VALIDATORS)),
            ],
            options={
                'ordering': ['type', 'name'],
            },
        ),
        migrations.CreateModel(
            name='PaymentMethod',
            fields=[
                ('is_active', models.BooleanField(db_index=True, default=True, help_text='Is this record active?')),
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                *timestamps(),
                ('name', models.CharField(max_length=255, unique=True)),
                ('description', models.TextField(blank=True)),
            ],
            options={
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='AppSetting',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                *timestamps(),
                ('app_title', models.CharField(default='Dashboard Donasi', max_length=255)),
                ('logo_url', models.CharField(blank=True, max_length=500)),
                ('favicon_url', models.CharField(blank=True, max_length=500)),
                ('primary_color', models.CharField(default='#2563eb', max_length=7, validators=[HEX_COLOR_VALIDATOR])),
                ('secondary_color', models.CharField(default='#1e40af', max_length=7, validators=[HEX_COLOR_VALIDATOR])),
                ('background_color', models.CharField(default='#ffffff', max_length=7, validators=[HEX_COLOR_VALIDATOR])),
                ('text_color', models.CharField(default='#1f2937', max_length=7, validators=[HEX_COLOR_VALIDATOR])),
                ('sidebar_color', models.CharField(default='#f8fafc', max_length=7, validators=[HEX_COLOR_VALIDATOR])),
            ],
            options={
                'ordering': ['created_at'],
            },
        ),
        migrations.CreateModel(
            name='Transaction',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                *timestamps(),
                ('program_type', models.CharField(choices=[('ZISWAF', 'ZISWAF'), ('QURBAN', 'Qurban')], db_index=True, max_length=10)),
                ('donor_name', models.CharField(max_length=255)),
                ('amount', models.DecimalField(blank=True, decimal_places=2, max_digits=15, null=True, validators=[django.core.validators.MinValueValidator(Decimal('0'))])),
                ('qurban_owner_name', models.CharField(blank=True, max_length=255)),
                ('qurban_amount', models.DecimalField(blank=True, decimal_places=2, max_digits=15, null=True, validators=[django.core.validators.MinValueValidator(Decimal('0'))])),
                ('volunteer_rate', models.DecimalField(blank=True, decimal_places=2, max_digits=5, null=True)),
                ('branch_rate', models.DecimalField(blank=True, decimal_places=2, max_digits=5, null=True)),
                ('ziswaf_volunteer_rate', models.DecimalField(blank=True, decimal_places=2, max_digits=5, null=True)),
                ('ziswaf_branch_rate', models.DecimalField(blank=True, decimal_places=2, max_digits=5, null=True)),
                ('transaction_date', models.DateTimeField(db_index=True)),
                ('proof_image', models.ImageField(blank=True, max_length=255, upload_to='transaction-proofs/')),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('valid', 'Valid'), ('double_duta', 'Double Duta'), ('double_input', 'Double Input'), ('not_in_account', 'Tidak Ada di Rekening'), ('other', 'Lainnya')], db_index=True, default='pending', max_length=20)),
                ('status_reason', models.TextField(blank=True)),
                ('validated_at', models.DateTimeField(blank=True, null=True)),
                ('branch', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='transactions', to='donations.branch')),
                ('team', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='transactions', to='donations.team')),
                ('volunteer', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='transactions', to=settings.AUTH_USER_MODEL)),
                ('program', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='transactions', to='donations.program')),
                ('ziswaf_program', models.ForeignKey(blank=True, help_text='ZISWAF program attached to a QURBAN donation', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='attached_transactions', to='donations.program')),
                ('payment_method', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='transactions', to='donations.paymentmethod')),
                ('validated_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='validated_transactions', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['status', 'created_at'], name='donations_t_status_8c1e4b_idx'),
                    models.Index(fields=['branch', 'status'], name='donations_t_branch_3a9d7f_idx'),
                    models.Index(fields=['volunteer', 'status'], name='donations_t_volunte_6b2c0e_idx'),
                ],
            },
        ),
    ]
