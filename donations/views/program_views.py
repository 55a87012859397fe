"""
Program & Payment Method Views
==============================

Programs carry the commission rates that transactions snapshot when they
are created. Changing a rate here never rewrites existing transactions.
"""

import logging

from django.core.exceptions import PermissionDenied
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_http_methods

from donations.forms.program_forms import ProgramForm, PaymentMethodForm
from donations.models import Program, PaymentMethod
from donations.permissions import PermissionChecker, api_login_required
from donations.serializers import serialize_program, serialize_payment_method
from donations.utils.http import parse_request_data, merge_with_instance, form_error_response


logger = logging.getLogger(__name__)


def _require_master_data(request):
    if not PermissionChecker(request.user).can_manage_master_data():
        raise PermissionDenied


# =============================================================================
# PROGRAMS
# =============================================================================

@require_http_methods(['GET', 'POST'])
@api_login_required
def program_collection(request):
    """
    GET: programs, optionally ?type=ZISWAF|QURBAN
    POST: create a program (admin)
    """
    if request.method == 'GET':
        programs = Program.objects.order_by('type', 'name')
        program_type = request.GET.get('type')
        if program_type:
            programs = programs.of_type(program_type)
        return JsonResponse({'success': True, 'data': [serialize_program(program) for program in programs]})

    _require_master_data(request)
    data, _ = parse_request_data(request)
    form = ProgramForm(data)
    if not form.is_valid():
        return form_error_response(form)

    program = form.save()
    logger.info(
        f"Program {program.code} created by user {request.user.pk} "
        f"(volunteer {program.volunteer_rate}%, branch {program.branch_rate}%)"
    )
    return JsonResponse({
        'success': True,
        'message': 'Program berhasil ditambahkan',
        'data': serialize_program(program),
    }, status=201)


@require_http_methods(['GET', 'PUT', 'PATCH', 'DELETE'])
@api_login_required
def program_item(request, program_id):
    program = get_object_or_404(Program, pk=program_id)

    if request.method == 'GET':
        return JsonResponse({'success': True, 'data': serialize_program(program)})

    _require_master_data(request)

    if request.method == 'DELETE':
        code = program.code
        program.delete()
        logger.info(f"Program {code} deleted by user {request.user.pk}")
        return JsonResponse({'success': True, 'message': 'Program berhasil dihapus'})

    data, _ = parse_request_data(request)
    form = ProgramForm(merge_with_instance(program, data, ProgramForm._meta.fields), instance=program)
    if not form.is_valid():
        return form_error_response(form)

    program = form.save()
    logger.info(
        f"Program {program.code} updated by user {request.user.pk} "
        f"(volunteer {program.volunteer_rate}%, branch {program.branch_rate}%)"
    )
    return JsonResponse({
        'success': True,
        'message': 'Program berhasil diperbarui',
        'data': serialize_program(program),
    })


# =============================================================================
# PAYMENT METHODS
# =============================================================================

@require_http_methods(['GET', 'POST'])
def payment_method_collection(request):
    """
    GET (public): active methods; ?include_inactive=1 for all
    POST: create a method (admin)
    """
    if request.method == 'GET':
        methods = PaymentMethod.objects.order_by('name')
        if request.GET.get('include_inactive') not in ('1', 'true', 'True'):
            methods = methods.active()
        return JsonResponse({
            'success': True,
            'data': [serialize_payment_method(method) for method in methods],
        })

    return payment_method_create(request)


@api_login_required
def payment_method_create(request):
    _require_master_data(request)
    data, _ = parse_request_data(request)
    data.setdefault('is_active', True)
    form = PaymentMethodForm(data)
    if not form.is_valid():
        return form_error_response(form)

    method = form.save()
    logger.info(f"Payment method '{method.name}' created by user {request.user.pk}")
    return JsonResponse({
        'success': True,
        'message': 'Metode pembayaran berhasil ditambahkan',
        'data': serialize_payment_method(method),
    }, status=201)


@require_http_methods(['GET', 'PUT', 'PATCH', 'DELETE'])
@api_login_required
def payment_method_item(request, method_id):
    method = get_object_or_404(PaymentMethod, pk=method_id)

    if request.method == 'GET':
        return JsonResponse({'success': True, 'data': serialize_payment_method(method)})

    _require_master_data(request)

    if request.method == 'DELETE':
        name = method.name
        method.delete()
        logger.info(f"Payment method '{name}' deleted by user {request.user.pk}")
        return JsonResponse({'success': True, 'message': 'Metode pembayaran berhasil dihapus'})

    data, _ = parse_request_data(request)
    form = PaymentMethodForm(
        merge_with_instance(method, data, PaymentMethodForm._meta.fields), instance=method
    )
    if not form.is_valid():
        return form_error_response(form)

    method = form.save()
    return JsonResponse({
        'success': True,
        'message': 'Metode pembayaran berhasil diperbarui',
        'data': serialize_payment_method(method),
    })
