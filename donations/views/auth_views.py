"""
Authentication Views
====================

Session login, logout, current user and profile update
"""

import logging

from django.contrib.auth import login, logout, authenticate, update_session_auth_hash
from django.http import JsonResponse
from django.views.decorators.csrf import ensure_csrf_cookie
from django.views.decorators.http import require_GET, require_POST, require_http_methods

from donations.forms.user_forms import LoginForm, ProfileForm
from donations.permissions import api_login_required
from donations.serializers import serialize_user
from donations.utils.http import parse_request_data, form_error_response


logger = logging.getLogger(__name__)


@require_GET
@ensure_csrf_cookie
def csrf_view(request):
    """Sets the CSRF cookie for the web client"""
    return JsonResponse({'success': True})


@require_POST
def login_view(request):
    """
    Login with email + password

    Returns the user record; the session cookie carries authentication.
    """
    data, _ = parse_request_data(request)
    form = LoginForm(data)

    if not form.is_valid():
        return form_error_response(form)

    user = authenticate(
        request,
        email=form.cleaned_data['email'].lower(),
        password=form.cleaned_data['password']
    )

    if user is None:
        logger.warning(f"Failed login for {form.cleaned_data['email']}")
        return JsonResponse(
            {'success': False, 'message': 'Email atau password salah'},
            status=401
        )

    login(request, user)
    logger.info(f"User {user.pk} logged in")

    return JsonResponse({
        'success': True,
        'message': 'Login berhasil',
        'data': serialize_user(user),
    })


@require_POST
@api_login_required
def logout_view(request):
    logger.info(f"User {request.user.pk} logged out")
    logout(request)
    return JsonResponse({'success': True, 'message': 'Logout berhasil'})


@require_GET
@api_login_required
def me_view(request):
    return JsonResponse({'success': True, 'data': serialize_user(request.user)})


@require_http_methods(['PUT', 'POST'])
@api_login_required
def profile_update(request):
    """Name, phone and (with the current password) a new password"""
    data, _ = parse_request_data(request)
    payload = {
        'name': data.get('name', request.user.name),
        'phone': data.get('phone', request.user.phone),
        'password': data.get('password', ''),
        'current_password': data.get('current_password', ''),
    }
    form = ProfileForm(payload, instance=request.user)

    if not form.is_valid():
        return form_error_response(form)

    user = form.save()
    if form.cleaned_data.get('password'):
        update_session_auth_hash(request, user)

    return JsonResponse({
        'success': True,
        'message': 'Profil berhasil diperbarui',
        'data': serialize_user(user),
    })
