"""
Permission System – Role-based Access Control
==============================================

Roles:   volunteer  →  branch  →  validator  →  admin

Every view that mutates state should:
    checker = PermissionChecker(request.user)
    if not checker.<method>(...):  raise PermissionDenied
"""

from functools import wraps

from django.http import JsonResponse


# =============================================================================
# CONSTANTS
# =============================================================================

class Roles:
    ADMIN     = 'admin'
    VALIDATOR = 'validator'
    BRANCH    = 'branch'
    VOLUNTEER = 'volunteer'


class Permissions:
    """Single source of truth.  Views must never hard-code role lists."""

    # ── visibility ───────────────────────────────────────────────────
    VIEW_ALL_BRANCHES = [Roles.ADMIN, Roles.VALIDATOR]

    # ── transactions ─────────────────────────────────────────────────
    CAN_CREATE_TRANSACTIONS   = [Roles.ADMIN, Roles.BRANCH, Roles.VOLUNTEER]
    CAN_VALIDATE_TRANSACTIONS = [Roles.ADMIN, Roles.VALIDATOR, Roles.BRANCH]
    CAN_IMPORT_TRANSACTIONS   = [Roles.ADMIN, Roles.BRANCH]

    # ── reporting ────────────────────────────────────────────────────
    CAN_VIEW_REPORTS   = [Roles.ADMIN, Roles.VALIDATOR, Roles.BRANCH]
    CAN_VIEW_DASHBOARD = [Roles.ADMIN, Roles.VALIDATOR, Roles.BRANCH, Roles.VOLUNTEER]

    # ── management ───────────────────────────────────────────────────
    CAN_MANAGE_MASTER_DATA = [Roles.ADMIN]
    CAN_MANAGE_USERS       = [Roles.ADMIN]
    CAN_MANAGE_SETTINGS    = [Roles.ADMIN]


# =============================================================================
# PERMISSION CHECKER
# =============================================================================

class PermissionChecker:

    def __init__(self, user):
        self.user   = user
        self.role   = user.role if user.is_authenticated else None
        self.branch = getattr(user, 'branch', None) if user.is_authenticated else None

    # ── role helpers ─────────────────────────────────────────────────
    def is_admin(self):     return self.role == Roles.ADMIN
    def is_validator(self): return self.role == Roles.VALIDATOR
    def is_branch(self):    return self.role == Roles.BRANCH
    def is_volunteer(self): return self.role == Roles.VOLUNTEER

    def _in_own_branch(self, obj):
        return bool(self.user.branch_id) and obj.branch_id == self.user.branch_id

    # =========================================================================
    # VIEW / READ
    # =========================================================================

    def can_view_all_branches(self):
        return self.role in Permissions.VIEW_ALL_BRANCHES

    def can_view_transaction(self, transaction):
        if self.can_view_all_branches():
            return True
        if self.is_branch():
            return self._in_own_branch(transaction)
        if self.is_volunteer():
            return transaction.volunteer_id == self.user.id
        return False

    def can_view_reports(self):   return self.role in Permissions.CAN_VIEW_REPORTS
    def can_view_dashboard(self): return self.role in Permissions.CAN_VIEW_DASHBOARD

    # =========================================================================
    # TRANSACTIONS
    # =========================================================================

    def can_create_transaction(self):
        return self.role in Permissions.CAN_CREATE_TRANSACTIONS

    def can_import_transactions(self):
        return self.role in Permissions.CAN_IMPORT_TRANSACTIONS

    # -----------------------------------------------------------------
    # EDIT / DELETE  – admin always; branch & volunteer while pending
    # -----------------------------------------------------------------
    def can_edit_transaction(self, transaction):
        if not self.user or not self.user.is_authenticated:
            return False
        if self.is_admin():
            return True
        if transaction.status != 'pending':
            return False
        if self.is_branch():
            return self._in_own_branch(transaction)
        if self.is_volunteer():
            return transaction.volunteer_id == self.user.id
        return False

    def can_delete_transaction(self, transaction):
        return self.can_edit_transaction(transaction)

    # -----------------------------------------------------------------
    # VALIDATE  – validator / admin anywhere, branch in own branch
    # -----------------------------------------------------------------
    def can_validate_transactions(self):
        return self.role in Permissions.CAN_VALIDATE_TRANSACTIONS

    def can_validate_transaction(self, transaction):
        if not self.can_validate_transactions():
            return False
        if self.is_branch():
            return self._in_own_branch(transaction)
        return True

    # =========================================================================
    # MANAGEMENT
    # =========================================================================

    def can_manage_master_data(self): return self.role in Permissions.CAN_MANAGE_MASTER_DATA
    def can_manage_users(self):       return self.role in Permissions.CAN_MANAGE_USERS
    def can_manage_settings(self):    return self.role in Permissions.CAN_MANAGE_SETTINGS

    def can_delete_user(self, user):
        return self.can_manage_users() and user.pk != self.user.pk

    # =========================================================================
    # QUERYSET FILTERS
    # =========================================================================

    def filter_transactions(self, queryset):
        if not self.user or not self.user.is_authenticated:
            return queryset.none()
        if self.can_view_all_branches():
            return queryset
        if self.is_branch() and self.branch:
            return queryset.filter(branch=self.branch)
        if self.is_volunteer():
            return queryset.filter(volunteer=self.user)
        return queryset.none()

    def filter_branches(self, queryset):
        if self.can_view_all_branches() or self.is_volunteer():
            return queryset
        if self.is_branch() and self.branch:
            return queryset.filter(id=self.branch.id)
        return queryset.none()

    def filter_users(self, queryset):
        if self.can_view_all_branches():
            return queryset
        if self.is_branch() and self.branch:
            return queryset.filter(branch=self.branch)
        return queryset.filter(pk=self.user.pk)

    def attribution_defaults(self):
        """Attribution fields forced onto submissions by scoped roles"""
        if self.is_volunteer():
            return {
                'branch': self.user.branch_id,
                'team': self.user.team_id,
                'volunteer': self.user.pk,
            }
        if self.is_branch():
            return {'branch': self.user.branch_id}
        return {}


# =============================================================================
# DECORATORS
# =============================================================================

def api_login_required(view_func):
    """401 JSON instead of a redirect for anonymous API callers"""
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        if not request.user.is_authenticated:
            return JsonResponse(
                {'success': False, 'message': 'Silakan login terlebih dahulu'},
                status=401
            )
        return view_func(request, *args, **kwargs)
    return wrapper
