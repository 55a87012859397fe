from django.urls import path

from donations.views import (
    csrf_view,
    login_view,
    logout_view,
    me_view,
    profile_update,
    dashboard_view,
    app_settings_view,
)

from donations.views.transaction_views import (
    transaction_collection,
    transaction_item,
    transaction_pending,
    my_transactions,
    my_transaction_stats,
    transaction_export,
)

from donations.views.validation_views import (
    transaction_validate,
    transaction_bulk_update_status,
)

from donations.views.import_views import (
    transaction_import,
    transaction_import_template,
)

from donations.views.report_views import (
    branch_reports,
    branch_report_export,
    branch_detail_report,
    volunteer_reports,
    volunteer_report_export,
    summary_report,
)

from donations.views.branch_views import (
    branch_collection,
    branch_item,
    team_collection,
    team_item,
)

from donations.views.program_views import (
    program_collection,
    program_item,
    payment_method_collection,
    payment_method_item,
)

from donations.views.user_views import (
    user_collection,
    user_item,
    users_by_branch,
    users_by_team,
)


app_name = 'donations'

urlpatterns = [
    # ============================================================================
    # AUTHENTICATION
    # ============================================================================
    path('csrf', csrf_view, name='csrf'),
    path('login', login_view, name='login'),
    path('logout', logout_view, name='logout'),
    path('user', me_view, name='me'),
    path('profile', profile_update, name='profile_update'),

    # ============================================================================
    # DASHBOARD & SETTINGS
    # ============================================================================
    path('dashboard', dashboard_view, name='dashboard'),
    path('app-settings', app_settings_view, name='app_settings'),

    # ============================================================================
    # TRANSACTIONS
    # ============================================================================
    path('transactions', transaction_collection, name='transaction_collection'),
    path('transactions/export', transaction_export, name='transaction_export'),
    path('transactions/import', transaction_import, name='transaction_import'),
    path('transactions/import-template', transaction_import_template, name='transaction_import_template'),
    path('transactions/pending', transaction_pending, name='transaction_pending'),
    path('transactions/my', my_transactions, name='my_transactions'),
    path('transactions/my/stats', my_transaction_stats, name='my_transaction_stats'),
    path('transactions/bulk-update-status', transaction_bulk_update_status, name='transaction_bulk_update_status'),
    path('transactions/<uuid:transaction_id>', transaction_item, name='transaction_item'),
    path('transactions/<uuid:transaction_id>/validate', transaction_validate, name='transaction_validate'),

    # ============================================================================
    # REPORTS
    # ============================================================================
    path('reports/branches', branch_reports, name='branch_reports'),
    path('reports/branches/export', branch_report_export, name='branch_report_export'),
    path('reports/branches/<uuid:branch_id>', branch_detail_report, name='branch_detail_report'),
    path('reports/volunteers', volunteer_reports, name='volunteer_reports'),
    path('reports/volunteers/export', volunteer_report_export, name='volunteer_report_export'),
    path('reports/summary', summary_report, name='summary_report'),

    # ============================================================================
    # MASTER DATA
    # ============================================================================
    path('branches', branch_collection, name='branch_collection'),
    path('branches/<uuid:branch_id>', branch_item, name='branch_item'),
    path('teams', team_collection, name='team_collection'),
    path('teams/<uuid:team_id>', team_item, name='team_item'),
    path('programs', program_collection, name='program_collection'),
    path('programs/<uuid:program_id>', program_item, name='program_item'),
    path('payment-methods', payment_method_collection, name='payment_method_collection'),
    path('payment-methods/<uuid:method_id>', payment_method_item, name='payment_method_item'),

    # ============================================================================
    # USERS
    # ============================================================================
    path('users', user_collection, name='user_collection'),
    path('users/<int:user_id>', user_item, name='user_item'),
    path('users/branch/<uuid:branch_id>', users_by_branch, name='users_by_branch'),
    path('users/team/<uuid:team_id>', users_by_team, name='users_by_team'),
]
