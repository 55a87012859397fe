"""
API Serializers
===============

The single wire schema for the JSON API. Every field is snake_case and
every related record is exposed as `<name>_id` plus a nested summary, so
clients never have to guess between naming conventions.

Money values are rendered as decimal strings; ids as strings for UUID
keyed records and integers for users.
"""


def _id(value):
    return str(value) if value is not None else None


def _money(value):
    return str(value) if value is not None else None


def _datetime(value):
    return value.isoformat() if value else None


def _ref(obj, *fields):
    """Compact nested representation of a related record"""
    if obj is None:
        return None
    data = {'id': _id(obj.pk) if not isinstance(obj.pk, int) else obj.pk}
    for field in fields:
        data[field] = getattr(obj, field)
    return data


# =============================================================================
# ORGANISATION
# =============================================================================

def serialize_branch(branch):
    return {
        'id': _id(branch.pk),
        'name': branch.name,
        'code': branch.code,
        'address': branch.address,
        'created_at': _datetime(branch.created_at),
        'updated_at': _datetime(branch.updated_at),
    }


def serialize_team(team):
    return {
        'id': _id(team.pk),
        'name': team.name,
        'code': team.code,
        'branch_id': _id(team.branch_id),
        'branch': _ref(team.branch, 'name', 'code'),
        'created_at': _datetime(team.created_at),
        'updated_at': _datetime(team.updated_at),
    }


def serialize_user(user):
    return {
        'id': user.pk,
        'name': user.name,
        'email': user.email,
        'phone': user.phone,
        'role': user.role,
        'role_display': user.get_role_display(),
        'branch_id': _id(user.branch_id),
        'team_id': _id(user.team_id),
        'branch': _ref(user.branch, 'name', 'code'),
        'team': _ref(user.team, 'name', 'code'),
        'is_active': user.is_active,
        'date_joined': _datetime(user.date_joined),
    }


# =============================================================================
# MASTER DATA
# =============================================================================

def serialize_program(program):
    return {
        'id': _id(program.pk),
        'type': program.type,
        'name': program.name,
        'code': program.code,
        'description': program.description,
        'volunteer_rate': _money(program.volunteer_rate),
        'branch_rate': _money(program.branch_rate),
        'created_at': _datetime(program.created_at),
        'updated_at': _datetime(program.updated_at),
    }


def serialize_payment_method(method):
    return {
        'id': _id(method.pk),
        'name': method.name,
        'description': method.description,
        'is_active': method.is_active,
        'created_at': _datetime(method.created_at),
        'updated_at': _datetime(method.updated_at),
    }


# =============================================================================
# TRANSACTIONS
# =============================================================================

def serialize_transaction(transaction):
    commission = transaction.commission
    return {
        'id': _id(transaction.pk),
        'donor_name': transaction.donor_name,
        'program_type': transaction.program_type,
        'program_id': _id(transaction.program_id),
        'ziswaf_program_id': _id(transaction.ziswaf_program_id),
        'amount': _money(transaction.amount),
        'qurban_amount': _money(transaction.qurban_amount),
        'qurban_owner_name': transaction.qurban_owner_name,
        'total_amount': _money(transaction.total_amount),
        'volunteer_rate': _money(transaction.volunteer_rate),
        'branch_rate': _money(transaction.branch_rate),
        'ziswaf_volunteer_rate': _money(transaction.ziswaf_volunteer_rate),
        'ziswaf_branch_rate': _money(transaction.ziswaf_branch_rate),
        'volunteer_commission': _money(commission['volunteer_commission']),
        'branch_commission': _money(commission['branch_commission']),
        'branch_id': _id(transaction.branch_id),
        'team_id': _id(transaction.team_id),
        'volunteer_id': transaction.volunteer_id,
        'payment_method_id': _id(transaction.payment_method_id),
        'transaction_date': _datetime(transaction.transaction_date),
        'proof_image': transaction.proof_image.name or None,
        'proof_image_url': transaction.proof_image.url if transaction.proof_image else None,
        'status': transaction.status,
        'status_display': transaction.get_status_display(),
        'status_reason': transaction.status_reason,
        'validated_at': _datetime(transaction.validated_at),
        'validated_by_id': transaction.validated_by_id,
        'branch': _ref(transaction.branch, 'name', 'code'),
        'team': _ref(transaction.team, 'name', 'code'),
        'volunteer': _ref(transaction.volunteer, 'name', 'email'),
        'program': _ref(transaction.program, 'name', 'code', 'type'),
        'ziswaf_program': _ref(transaction.ziswaf_program, 'name', 'code', 'type'),
        'payment_method': _ref(transaction.payment_method, 'name'),
        'validated_by': _ref(transaction.validated_by, 'name'),
        'created_at': _datetime(transaction.created_at),
        'updated_at': _datetime(transaction.updated_at),
    }


def serialize_page(page, serializer):
    """Paginated list envelope"""
    paginator = page.paginator
    return {
        'data': [serializer(item) for item in page.object_list],
        'current_page': page.number,
        'last_page': paginator.num_pages,
        'per_page': paginator.per_page,
        'total': paginator.count,
    }


# =============================================================================
# SETTINGS
# =============================================================================

def serialize_app_setting(setting):
    return {
        'app_title': setting.app_title,
        'logo_url': setting.logo_url or None,
        'favicon_url': setting.favicon_url or None,
        'primary_color': setting.primary_color,
        'secondary_color': setting.secondary_color,
        'background_color': setting.background_color,
        'text_color': setting.text_color,
        'sidebar_color': setting.sidebar_color,
    }
