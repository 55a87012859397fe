"""
Request Middleware
==================

- AppSettingsMiddleware: attaches the branding record as request.app_settings
- JsonErrorMiddleware: maps exceptions raised by API views to JSON responses
"""

import logging

from django.core.exceptions import ObjectDoesNotExist, PermissionDenied, ValidationError
from django.db.models import ProtectedError
from django.http import Http404, JsonResponse
from django.utils.functional import SimpleLazyObject

from donations.models import AppSetting


logger = logging.getLogger(__name__)


def validation_error_dict(error):
    """Field-keyed message lists for a django ValidationError"""
    if hasattr(error, 'error_dict'):
        return {
            field: [str(message) for message in ValidationError(messages).messages]
            for field, messages in error.error_dict.items()
        }
    return {'non_field_errors': [str(message) for message in error.messages]}


def error_response(message, status, errors=None):
    payload = {'success': False, 'message': message}
    if errors:
        payload['errors'] = errors
    return JsonResponse(payload, status=status)


class AppSettingsMiddleware:
    """Loads AppSetting at most once per request, on first access"""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request.app_settings = SimpleLazyObject(AppSetting.load)
        return self.get_response(request)


class JsonErrorMiddleware:
    """
    JSON error bodies for /api/ views

    PermissionDenied -> 403, Http404 / DoesNotExist -> 404,
    ValidationError -> 422, ProtectedError -> 409, anything else -> 500.
    Unexpected exceptions are logged with traceback; the client only gets
    a generic message.
    """

    API_PREFIX = '/api/'

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        return self.get_response(request)

    def process_exception(self, request, exception):
        if not request.path.startswith(self.API_PREFIX):
            return None

        if isinstance(exception, PermissionDenied):
            return error_response('Anda tidak memiliki akses untuk tindakan ini', 403)

        if isinstance(exception, (Http404, ObjectDoesNotExist)):
            return error_response('Data tidak ditemukan', 404)

        if isinstance(exception, ValidationError):
            return error_response('Data yang dikirim tidak valid', 422, validation_error_dict(exception))

        if isinstance(exception, ProtectedError):
            return error_response('Data masih digunakan oleh data lain dan tidak dapat dihapus', 409)

        logger.exception(f"Unhandled error on {request.method} {request.path}")
        return error_response('Terjadi kesalahan pada server', 500)
