"""
tokenctl - token management CLI

Commands:
- tokenctl token create/associate/transfer/create-from-file/list/stats/remove
- tokenctl alias add/list/remove
- tokenctl credentials import/list/remove/set-operator/get-operator
- tokenctl ledger tail/verify
"""

__version__ = "0.1.0"
