from .auth_views import (
    csrf_view,
    login_view,
    logout_view,
    me_view,
    profile_update,
)

from .dashboard import (
    dashboard_view,
)

from .transaction_views import (
    transaction_collection,
    transaction_item,
    transaction_pending,
    my_transactions,
    my_transaction_stats,
    transaction_export,
)

from .validation_views import (
    transaction_validate,
    transaction_bulk_update_status,
)

from .import_views import (
    transaction_import,
    transaction_import_template,
)

from .report_views import (
    branch_reports,
    branch_report_export,
    branch_detail_report,
    volunteer_reports,
    volunteer_report_export,
    summary_report,
)

from .branch_views import (
    branch_collection,
    branch_item,
    team_collection,
    team_item,
)

from .program_views import (
    program_collection,
    program_item,
    payment_method_collection,
    payment_method_item,
)

from .user_views import (
    user_collection,
    user_item,
    users_by_branch,
    users_by_team,
)

from .setting_views import (
    app_settings_view,
)
