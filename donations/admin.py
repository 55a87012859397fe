from django.contrib import admin
from .models import (
    Branch, Team, User, Program, PaymentMethod, Transaction, AppSetting
)

# ==============================================================================
# ORGANISATION
# ==============================================================================

class TeamInline(admin.TabularInline):
    model = Team
    extra = 0
    fields = ['code', 'name']


@admin.register(Branch)
class BranchAdmin(admin.ModelAdmin):
    list_display = ['code', 'name', 'address', 'created_at']
    search_fields = ['code', 'name']
    readonly_fields = ['created_at', 'updated_at']
    inlines = [TeamInline]


@admin.register(Team)
class TeamAdmin(admin.ModelAdmin):
    list_display = ['code', 'name', 'branch', 'created_at']
    list_filter = ['branch']
    search_fields = ['code', 'name']
    readonly_fields = ['created_at', 'updated_at']


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ['email', 'name', 'role', 'branch', 'team', 'is_active']
    list_filter = ['role', 'is_active', 'branch']
    search_fields = ['email', 'name', 'phone']
    readonly_fields = ['date_joined', 'last_login']

    fieldsets = (
        ('Authentication', {
            'fields': ('email', 'password')
        }),
        ('Personal Info', {
            'fields': ('name', 'phone')
        }),
        ('Assignment', {
            'fields': ('role', 'branch', 'team')
        }),
        ('Permissions', {
            'fields': ('is_active', 'is_staff', 'is_superuser')
        }),
        ('Timestamps', {
            'fields': ('date_joined', 'last_login'),
            'classes': ('collapse',)
        }),
    )


# ==============================================================================
# MASTER DATA
# ==============================================================================

@admin.register(Program)
class ProgramAdmin(admin.ModelAdmin):
    list_display = ['code', 'name', 'type', 'volunteer_rate', 'branch_rate']
    list_filter = ['type']
    search_fields = ['code', 'name']
    readonly_fields = ['created_at', 'updated_at']


@admin.register(PaymentMethod)
class PaymentMethodAdmin(admin.ModelAdmin):
    list_display = ['name', 'is_active', 'created_at']
    list_filter = ['is_active']
    search_fields = ['name']


# ==============================================================================
# TRANSACTIONS
# ==============================================================================

@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    list_display = ['donor_name', 'program_type', 'program', 'amount', 'qurban_amount',
                   'branch', 'volunteer', 'status', 'transaction_date']
    list_filter = ['program_type', 'status', 'branch']
    search_fields = ['donor_name', 'qurban_owner_name', 'volunteer__name']
    readonly_fields = ['volunteer_rate', 'branch_rate', 'ziswaf_volunteer_rate',
                      'ziswaf_branch_rate', 'validated_at', 'validated_by',
                      'created_at', 'updated_at']
    date_hierarchy = 'transaction_date'
    list_select_related = ['program', 'branch', 'volunteer']


@admin.register(AppSetting)
class AppSettingAdmin(admin.ModelAdmin):
    list_display = ['app_title', 'primary_color', 'updated_at']
