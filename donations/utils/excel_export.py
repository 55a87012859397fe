"""
Excel Export Utilities using Pandas
===================================

Report and transaction workbooks: a "RINGKASAN LAPORAN" summary block
followed by the detail table and a TOTAL KESELURUHAN row. Also builds
the 13-column import template.
"""

from io import BytesIO

import pandas as pd
from django.http import HttpResponse
from django.utils import timezone
from openpyxl.styles import Font, PatternFill, Alignment
from openpyxl.utils import get_column_letter

from donations.utils.commission import calculate_commission, calculate_total_amount
from donations.utils.money import format_rupiah


XLSX_CONTENT_TYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'

HEADER_FILL = PatternFill(start_color='D97706', end_color='D97706', fill_type='solid')
HEADER_FONT = Font(bold=True, color='FFFFFF', size=11)
TOTALS_FILL = PatternFill(start_color='FEF3C7', end_color='FEF3C7', fill_type='solid')
TOTALS_FONT = Font(bold=True, size=11)
TITLE_FONT = Font(bold=True, size=14, color='D97706')
SECTION_FONT = Font(bold=True, size=12)

TOTAL_LABEL = 'TOTAL KESELURUHAN'


def create_excel_response(filename='report.xlsx'):
    """Create an HTTP response for Excel file download"""
    response = HttpResponse(content_type=XLSX_CONTENT_TYPE)
    response['Content-Disposition'] = f'attachment; filename="{filename}"'
    return response


def _workbook_response(output, filename):
    output.seek(0)
    response = create_excel_response(filename)
    response.write(output.read())
    return response


def write_summary_sheet(writer, sheet_name, summary_rows, section_title, detail_df, column_widths=None):
    """
    Write summary block + detail table into one sheet

    Layout:
        row 1                 RINGKASAN LAPORAN
        rows 2..n+1           label | value
        blank row
        section title         DETAIL PER ...
        header + detail rows  (last row is the totals row)
    """
    detail_start = len(summary_rows) + 3  # 0-based row index of the header
    detail_df.to_excel(writer, sheet_name=sheet_name, index=False, startrow=detail_start)

    worksheet = writer.sheets[sheet_name]

    worksheet.cell(row=1, column=1, value='RINGKASAN LAPORAN').font = TITLE_FONT
    for offset, (label, value) in enumerate(summary_rows, start=2):
        worksheet.cell(row=offset, column=1, value=label).font = Font(bold=True)
        worksheet.cell(row=offset, column=2, value=value)

    worksheet.cell(row=detail_start, column=1, value=section_title).font = SECTION_FONT

    header_row = detail_start + 1
    for col_num in range(1, len(detail_df.columns) + 1):
        cell = worksheet.cell(row=header_row, column=col_num)
        cell.fill = HEADER_FILL
        cell.font = HEADER_FONT
        cell.alignment = Alignment(horizontal='center', vertical='center')

    if len(detail_df) and TOTAL_LABEL in detail_df.iloc[-1].astype(str).tolist():
        last_row = header_row + len(detail_df)
        for col_num in range(1, len(detail_df.columns) + 1):
            cell = worksheet.cell(row=last_row, column=col_num)
            cell.fill = TOTALS_FILL
            cell.font = TOTALS_FONT

    widths = column_widths or {}
    for col_num, column in enumerate(detail_df.columns, start=1):
        worksheet.column_dimensions[get_column_letter(col_num)].width = widths.get(
            column, max(14, len(str(column)) + 4)
        )
    worksheet.column_dimensions['A'].width = max(worksheet.column_dimensions['A'].width or 0, 24)

    return worksheet


# =============================================================================
# REPORTS
# =============================================================================

def export_branch_report_excel(rows, totals, label):
    """Laporan Cabang <label>.xlsx"""
    output = BytesIO()
    writer = pd.ExcelWriter(output, engine='openpyxl')

    records = []
    for index, row in enumerate(rows, start=1):
        records.append({
            'No': index,
            'Nama Cabang': row['name'],
            'Kode Cabang': row['code'],
            'Total Donasi': format_rupiah(row['total_donations']),
            'Total Donasi ZISWAF': format_rupiah(row['total_ziswaf']),
            'Total Donasi Qurban': format_rupiah(row['total_qurban']),
            'Regulasi Cabang': format_rupiah(row['total_commission']),
            'Total Transaksi': row['total_transactions'],
            'Tervalidasi': row['validated_transactions'],
            'Pending': row['pending_transactions'],
            'Ditolak': row['rejected_transactions'],
        })
    records.append({
        'No': '',
        'Nama Cabang': TOTAL_LABEL,
        'Kode Cabang': '',
        'Total Donasi': format_rupiah(totals['total_donations']),
        'Total Donasi ZISWAF': format_rupiah(totals['total_ziswaf']),
        'Total Donasi Qurban': format_rupiah(totals['total_qurban']),
        'Regulasi Cabang': format_rupiah(totals['total_commission']),
        'Total Transaksi': totals['total_transactions'],
        'Tervalidasi': totals['validated_transactions'],
        'Pending': totals['pending_transactions'],
        'Ditolak': totals['rejected_transactions'],
    })

    summary_rows = [
        ('Periode', label),
        ('Total Semua Donasi', format_rupiah(totals['total_donations'])),
        ('Total Donasi ZISWAF', format_rupiah(totals['total_ziswaf'])),
        ('Total Donasi Qurban', format_rupiah(totals['total_qurban'])),
        ('Total Transaksi', totals['total_transactions']),
    ]

    write_summary_sheet(
        writer, 'Laporan Cabang', summary_rows, 'DETAIL PER CABANG', pd.DataFrame(records),
        column_widths={'No': 6, 'Nama Cabang': 30, 'Kode Cabang': 14},
    )

    writer.close()
    return _workbook_response(output, f'Laporan Cabang {label}.xlsx')


def export_volunteer_report_excel(rows, totals, label):
    """Laporan Relawan <label>.xlsx"""
    output = BytesIO()
    writer = pd.ExcelWriter(output, engine='openpyxl')

    records = []
    for index, row in enumerate(rows, start=1):
        records.append({
            'No': index,
            'Nama Relawan': row['name'],
            'Tim': row['team_name'],
            'Cabang': row['branch_name'],
            'Total Donasi': format_rupiah(row['total_donations']),
            'Total Donasi ZISWAF': format_rupiah(row['total_ziswaf']),
            'Total Donasi Qurban': format_rupiah(row['total_qurban']),
            'Regulasi Relawan': format_rupiah(row['total_commission']),
            'Total Transaksi': row['total_transactions'],
            'Tervalidasi': row['validated_transactions'],
            'Pending': row['pending_transactions'],
        })
    records.append({
        'No': '',
        'Nama Relawan': TOTAL_LABEL,
        'Tim': '',
        'Cabang': '',
        'Total Donasi': format_rupiah(totals['total_donations']),
        'Total Donasi ZISWAF': format_rupiah(totals['total_ziswaf']),
        'Total Donasi Qurban': format_rupiah(totals['total_qurban']),
        'Regulasi Relawan': format_rupiah(totals['total_commission']),
        'Total Transaksi': totals['total_transactions'],
        'Tervalidasi': totals['validated_transactions'],
        'Pending': totals['pending_transactions'],
    })

    summary_rows = [
        ('Periode', label),
        ('Total Semua Donasi', format_rupiah(totals['total_donations'])),
        ('Total Donasi ZISWAF', format_rupiah(totals['total_ziswaf'])),
        ('Total Donasi Qurban', format_rupiah(totals['total_qurban'])),
        ('Total Relawan', len(rows)),
        ('Total Transaksi', totals['total_transactions']),
    ]

    write_summary_sheet(
        writer, 'Laporan Relawan', summary_rows, 'DETAIL PER RELAWAN', pd.DataFrame(records),
        column_widths={'No': 6, 'Nama Relawan': 30, 'Tim': 20, 'Cabang': 20},
    )

    writer.close()
    return _workbook_response(output, f'Laporan Relawan {label}.xlsx')


# =============================================================================
# TRANSACTIONS
# =============================================================================

def export_transactions_excel(transactions, label):
    """Filtered transaction list with per-row commissions"""
    output = BytesIO()
    writer = pd.ExcelWriter(output, engine='openpyxl')

    records = []
    total_amount = total_ziswaf = total_qurban = total_volunteer = total_branch = 0
    for index, transaction in enumerate(transactions, start=1):
        commission = calculate_commission(transaction)
        amount_total = calculate_total_amount(transaction)
        total_amount += amount_total
        total_ziswaf += transaction.amount or 0
        total_qurban += transaction.qurban_amount or 0
        total_volunteer += commission['volunteer_commission']
        total_branch += commission['branch_commission']
        records.append({
            'No': index,
            'Tanggal': timezone.localtime(transaction.transaction_date).strftime('%d/%m/%Y %H:%M:%S'),
            'Nama Donatur': transaction.donor_name,
            'Jenis Program': transaction.program_type,
            'Program': transaction.program.name,
            'Program ZISWAF': transaction.ziswaf_program.name if transaction.ziswaf_program_id else '',
            'Nominal': format_rupiah(transaction.amount or 0),
            'Nominal Qurban': format_rupiah(transaction.qurban_amount or 0),
            'Nama Pemilik Qurban': transaction.qurban_owner_name,
            'Total': format_rupiah(amount_total),
            'Regulasi Relawan': format_rupiah(commission['volunteer_commission']),
            'Regulasi Cabang': format_rupiah(commission['branch_commission']),
            'Cabang': transaction.branch.name,
            'Tim': transaction.team.name,
            'Relawan': transaction.volunteer.name,
            'Metode Pembayaran': transaction.payment_method.name,
            'Status': transaction.get_status_display(),
            'Keterangan': transaction.status_reason,
        })
    records.append({
        'No': '', 'Tanggal': '', 'Nama Donatur': TOTAL_LABEL, 'Jenis Program': '', 'Program': '',
        'Program ZISWAF': '',
        'Nominal': format_rupiah(total_ziswaf),
        'Nominal Qurban': format_rupiah(total_qurban),
        'Nama Pemilik Qurban': '',
        'Total': format_rupiah(total_amount),
        'Regulasi Relawan': format_rupiah(total_volunteer),
        'Regulasi Cabang': format_rupiah(total_branch),
        'Cabang': '', 'Tim': '', 'Relawan': '', 'Metode Pembayaran': '', 'Status': '', 'Keterangan': '',
    })

    summary_rows = [
        ('Periode', label),
        ('Total Semua Donasi', format_rupiah(total_amount)),
        ('Total Donasi ZISWAF', format_rupiah(total_ziswaf)),
        ('Total Donasi Qurban', format_rupiah(total_qurban)),
        ('Total Transaksi', len(records) - 1),
    ]

    write_summary_sheet(
        writer, 'Transaksi', summary_rows, 'DETAIL TRANSAKSI', pd.DataFrame(records),
        column_widths={'No': 6, 'Tanggal': 20, 'Nama Donatur': 28, 'Keterangan': 30},
    )

    writer.close()
    return _workbook_response(output, f'Data Transaksi {label}.xlsx')


# =============================================================================
# IMPORT TEMPLATE
# =============================================================================

def export_import_template(columns, instructions, example_rows):
    """Template workbook: data sheet + instructions sheet"""
    output = BytesIO()
    writer = pd.ExcelWriter(output, engine='openpyxl')

    data_df = pd.DataFrame(example_rows, columns=columns)
    data_df.to_excel(writer, sheet_name='Template Import', index=False)

    worksheet = writer.sheets['Template Import']
    for col_num, column in enumerate(columns, start=1):
        cell = worksheet.cell(row=1, column=col_num)
        cell.fill = HEADER_FILL
        cell.font = HEADER_FONT
        cell.alignment = Alignment(horizontal='center', vertical='center')
        worksheet.column_dimensions[get_column_letter(col_num)].width = max(16, len(column) + 4)

    instructions_df = pd.DataFrame(instructions, columns=['Kolom', 'Keterangan'])
    instructions_df.to_excel(writer, sheet_name='Petunjuk', index=False)

    guide = writer.sheets['Petunjuk']
    for col_num in (1, 2):
        cell = guide.cell(row=1, column=col_num)
        cell.fill = HEADER_FILL
        cell.font = HEADER_FONT
    guide.column_dimensions['A'].width = 24
    guide.column_dimensions['B'].width = 90

    writer.close()
    return _workbook_response(output, 'Template Import Transaksi.xlsx')
