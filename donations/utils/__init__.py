"""
Donations Utilities Package
===========================

Provides utility functions for:
- Commission calculation (pure, single rule)
- Money conversion and Rupiah formatting
- Date window resolution for dashboard/report/list filters
- Report rollups
- Excel export (Pandas/openpyxl) and import
- Request parsing for the JSON API

Import directly from submodules to avoid circular imports:
    from donations.utils.commission import calculate_commission
    from donations.utils.excel_export import export_branch_report_excel
"""
