"""
Donations Forms Package
=======================

ModelForms and plain forms validating the JSON API payloads.
Import directly from submodules:
    from donations.forms.transaction_forms import TransactionForm
"""
