"""
User Management Views
=====================

Admin-managed accounts for every role. Branch users can read the accounts
of their own branch; volunteers only see themselves.
"""

import logging

from django.core.exceptions import PermissionDenied
from django.db.models import Q
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_http_methods

from donations.forms.user_forms import UserForm
from donations.models import Branch, Team, User
from donations.permissions import PermissionChecker, api_login_required
from donations.serializers import serialize_user, serialize_page
from donations.utils.http import (
    parse_request_data,
    merge_with_instance,
    paginate,
    form_error_response,
)


logger = logging.getLogger(__name__)


def _visible_users(checker):
    return checker.filter_users(User.objects.select_related('branch', 'team'))


# =============================================================================
# COLLECTION
# =============================================================================

@require_http_methods(['GET', 'POST'])
@api_login_required
def user_collection(request):
    """
    GET: paginated users, filters branch_id, team_id, role, search
    POST: create a user (admin)
    """
    checker = PermissionChecker(request.user)

    if request.method == 'GET':
        users = _visible_users(checker)

        for param, lookup in (('branch_id', 'branch_id'), ('team_id', 'team_id'), ('role', 'role')):
            value = request.GET.get(param)
            if value:
                users = users.filter(**{lookup: value})

        search = request.GET.get('search')
        if search:
            users = users.filter(Q(name__icontains=search) | Q(email__icontains=search))

        page = paginate(request, users.order_by('name'))
        return JsonResponse(serialize_page(page, serialize_user))

    if not checker.can_manage_users():
        raise PermissionDenied

    data, _ = parse_request_data(request)
    form = UserForm(data)
    if not form.is_valid():
        return form_error_response(form)

    user = form.save()
    logger.info(f"User {user.pk} ({user.role}) created by user {request.user.pk}")
    return JsonResponse({
        'success': True,
        'message': 'Pengguna berhasil ditambahkan',
        'data': serialize_user(user),
    }, status=201)


# =============================================================================
# ITEM
# =============================================================================

@require_http_methods(['GET', 'PUT', 'PATCH', 'DELETE'])
@api_login_required
def user_item(request, user_id):
    checker = PermissionChecker(request.user)
    user = get_object_or_404(_visible_users(checker), pk=user_id)

    if request.method == 'GET':
        return JsonResponse({'success': True, 'data': serialize_user(user)})

    if request.method == 'DELETE':
        return user_delete(request, user, checker)

    if not checker.can_manage_users():
        raise PermissionDenied

    data, _ = parse_request_data(request)
    form = UserForm(merge_with_instance(user, data, UserForm._meta.fields), instance=user)
    if not form.is_valid():
        return form_error_response(form)

    user = form.save()
    logger.info(f"User {user.pk} updated by user {request.user.pk}")
    return JsonResponse({
        'success': True,
        'message': 'Pengguna berhasil diperbarui',
        'data': serialize_user(user),
    })


def user_delete(request, user, checker):
    """Admins cannot delete their own account"""
    if not checker.can_delete_user(user):
        raise PermissionDenied

    user_id = user.pk
    user.delete()
    logger.info(f"User {user_id} deleted by user {request.user.pk}")
    return JsonResponse({'success': True, 'message': 'Pengguna berhasil dihapus'})


# =============================================================================
# BY BRANCH / TEAM
# =============================================================================

@require_GET
@api_login_required
def users_by_branch(request, branch_id):
    """Accounts attached to a branch, optionally ?role="""
    checker = PermissionChecker(request.user)
    branch = get_object_or_404(checker.filter_branches(Branch.objects.all()), pk=branch_id)

    users = _visible_users(checker).filter(branch=branch)
    role = request.GET.get('role')
    if role:
        users = users.filter(role=role)

    return JsonResponse({'success': True, 'data': [serialize_user(user) for user in users.order_by('name')]})


@require_GET
@api_login_required
def users_by_team(request, team_id):
    """Accounts attached to a team, optionally ?role="""
    checker = PermissionChecker(request.user)
    team = get_object_or_404(Team, pk=team_id)

    users = _visible_users(checker).filter(team=team)
    role = request.GET.get('role')
    if role:
        users = users.filter(role=role)

    return JsonResponse({'success': True, 'data': [serialize_user(user) for user in users.order_by('name')]})
