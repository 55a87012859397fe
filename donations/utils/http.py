"""
Request Helpers
===============

Body parsing for JSON and multipart payloads (including multipart PUT),
partial-update merging and pagination for the JSON API views.
"""

import json
from io import BytesIO

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.paginator import Paginator
from django.forms.models import model_to_dict
from django.http import JsonResponse, QueryDict
from django.http.multipartparser import MultiPartParser, MultiPartParserError


def parse_request_data(request):
    """
    Return (data, files) for the request body

    - application/json: decoded object, no files
    - POST form/multipart: request.POST / request.FILES
    - PUT/PATCH multipart: parsed with MultiPartParser
    """
    content_type = request.content_type or ''

    if content_type == 'application/json':
        try:
            data = json.loads(request.body or b'{}')
        except ValueError:
            raise ValidationError({'body': 'Body JSON tidak valid'})
        if not isinstance(data, dict):
            raise ValidationError({'body': 'Body JSON harus berupa objek'})
        return data, {}

    if request.method == 'POST':
        return request.POST.dict(), request.FILES

    if content_type.startswith('multipart/form-data'):
        try:
            data, files = MultiPartParser(
                request.META, BytesIO(request.body), request.upload_handlers, request.encoding
            ).parse()
        except MultiPartParserError:
            raise ValidationError({'body': 'Body multipart tidak valid'})
        return data.dict(), files

    return QueryDict(request.body, encoding=request.encoding).dict(), {}


def merge_with_instance(instance, data, fields, file_fields=()):
    """
    Overlay submitted values on the instance's current values

    Lets PUT carry only the fields that change while the ModelForm still
    validates the full record.
    """
    current = model_to_dict(instance, fields=[name for name in fields if name not in file_fields])
    current = {key: value for key, value in current.items() if value is not None}
    current.update(data)
    return current


def paginate(request, queryset, per_page=None):
    paginator = Paginator(queryset, per_page or settings.DONATIONS_PAGE_SIZE)
    return paginator.get_page(request.GET.get('page'))


def form_errors(form):
    """{field: [messages]} for a bound form"""
    return {field: [str(message) for message in errors] for field, errors in form.errors.items()}


def form_error_response(form, message='Data yang dikirim tidak valid'):
    return JsonResponse(
        {'success': False, 'message': message, 'errors': form_errors(form)},
        status=422
    )


def without_keys(data, *keys):
    return {key: value for key, value in data.items() if key not in keys}
