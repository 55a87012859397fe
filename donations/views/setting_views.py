"""
Application Settings Views
==========================

Branding and theme colours. Readable without login so the login page can
be themed; only admins can change them.
"""

import logging

from django.core.exceptions import PermissionDenied
from django.http import JsonResponse
from django.views.decorators.http import require_http_methods

from donations.forms.setting_forms import AppSettingForm
from donations.models import AppSetting
from donations.permissions import PermissionChecker
from donations.serializers import serialize_app_setting
from donations.utils.http import parse_request_data, merge_with_instance, form_error_response


logger = logging.getLogger(__name__)


@require_http_methods(['GET', 'PUT', 'PATCH', 'POST'])
def app_settings_view(request):
    if request.method == 'GET':
        return JsonResponse({'success': True, 'data': serialize_app_setting(request.app_settings)})

    if not request.user.is_authenticated:
        return JsonResponse(
            {'success': False, 'message': 'Silakan login terlebih dahulu'},
            status=401
        )
    if not PermissionChecker(request.user).can_manage_settings():
        raise PermissionDenied

    setting = AppSetting.load()
    data, _ = parse_request_data(request)
    form = AppSettingForm(
        merge_with_instance(setting, data, AppSettingForm._meta.fields), instance=setting
    )
    if not form.is_valid():
        return form_error_response(form)

    setting = form.save()
    logger.info(f"App settings updated by user {request.user.pk}")
    return JsonResponse({
        'success': True,
        'message': 'Pengaturan berhasil disimpan',
        'data': serialize_app_setting(setting),
    })
