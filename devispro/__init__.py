"""DevisPro BTP: quotes and invoices for building contractors."""

__version__ = "0.1.0"
