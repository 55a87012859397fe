"""
Branch & Team Views
===================

CRUD for branches and teams. Everybody signed in can read (branch users
see their own branch only); mutations are admin-only.
"""

import logging

from django.core.exceptions import PermissionDenied
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_http_methods

from donations.forms.branch_forms import BranchForm, TeamForm
from donations.models import Branch, Team
from donations.permissions import PermissionChecker, api_login_required
from donations.serializers import serialize_branch, serialize_team
from donations.utils.http import parse_request_data, merge_with_instance, form_error_response


logger = logging.getLogger(__name__)


def _require_master_data(checker):
    if not checker.can_manage_master_data():
        raise PermissionDenied


# =============================================================================
# BRANCHES
# =============================================================================

@require_http_methods(['GET', 'POST'])
@api_login_required
def branch_collection(request):
    """
    GET: all branches visible to the caller, by name
    POST: create a branch (admin)
    """
    checker = PermissionChecker(request.user)

    if request.method == 'GET':
        branches = checker.filter_branches(Branch.objects.all()).order_by('name')
        search = request.GET.get('search')
        if search:
            branches = branches.filter(name__icontains=search)
        return JsonResponse({'success': True, 'data': [serialize_branch(branch) for branch in branches]})

    _require_master_data(checker)
    data, _ = parse_request_data(request)
    form = BranchForm(data)
    if not form.is_valid():
        return form_error_response(form)

    branch = form.save()
    logger.info(f"Branch {branch.code} created by user {request.user.pk}")
    return JsonResponse({
        'success': True,
        'message': 'Cabang berhasil ditambahkan',
        'data': serialize_branch(branch),
    }, status=201)


@require_http_methods(['GET', 'PUT', 'PATCH', 'DELETE'])
@api_login_required
def branch_item(request, branch_id):
    checker = PermissionChecker(request.user)
    branch = get_object_or_404(checker.filter_branches(Branch.objects.all()), pk=branch_id)

    if request.method == 'GET':
        data = serialize_branch(branch)
        data['teams'] = [serialize_team(team) for team in branch.teams.select_related('branch').order_by('name')]
        return JsonResponse({'success': True, 'data': data})

    _require_master_data(checker)

    if request.method == 'DELETE':
        code = branch.code
        branch.delete()
        logger.info(f"Branch {code} deleted by user {request.user.pk}")
        return JsonResponse({'success': True, 'message': 'Cabang berhasil dihapus'})

    data, _ = parse_request_data(request)
    form = BranchForm(merge_with_instance(branch, data, BranchForm._meta.fields), instance=branch)
    if not form.is_valid():
        return form_error_response(form)

    branch = form.save()
    logger.info(f"Branch {branch.code} updated by user {request.user.pk}")
    return JsonResponse({
        'success': True,
        'message': 'Cabang berhasil diperbarui',
        'data': serialize_branch(branch),
    })


# =============================================================================
# TEAMS
# =============================================================================

def _visible_teams(checker):
    teams = Team.objects.select_related('branch')
    if checker.is_branch():
        return teams.filter(branch_id=checker.user.branch_id)
    return teams


@require_http_methods(['GET', 'POST'])
@api_login_required
def team_collection(request):
    """
    GET: teams, optionally ?branch_id=
    POST: create a team (admin)
    """
    checker = PermissionChecker(request.user)

    if request.method == 'GET':
        teams = _visible_teams(checker).order_by('name')
        branch_id = request.GET.get('branch_id')
        if branch_id:
            teams = teams.filter(branch_id=branch_id)
        return JsonResponse({'success': True, 'data': [serialize_team(team) for team in teams]})

    _require_master_data(checker)
    data, _ = parse_request_data(request)
    form = TeamForm(data)
    if not form.is_valid():
        return form_error_response(form)

    team = form.save()
    logger.info(f"Team {team.code} created in branch {team.branch_id} by user {request.user.pk}")
    return JsonResponse({
        'success': True,
        'message': 'Tim berhasil ditambahkan',
        'data': serialize_team(team),
    }, status=201)


@require_http_methods(['GET', 'PUT', 'PATCH', 'DELETE'])
@api_login_required
def team_item(request, team_id):
    checker = PermissionChecker(request.user)
    team = get_object_or_404(_visible_teams(checker), pk=team_id)

    if request.method == 'GET':
        return JsonResponse({'success': True, 'data': serialize_team(team)})

    _require_master_data(checker)

    if request.method == 'DELETE':
        code = team.code
        team.delete()
        logger.info(f"Team {code} deleted by user {request.user.pk}")
        return JsonResponse({'success': True, 'message': 'Tim berhasil dihapus'})

    data, _ = parse_request_data(request)
    form = TeamForm(merge_with_instance(team, data, TeamForm._meta.fields), instance=team)
    if not form.is_valid():
        return form_error_response(form)

    team = form.save()
    return JsonResponse({
        'success': True,
        'message': 'Tim berhasil diperbarui',
        'data': serialize_team(team),
    })
