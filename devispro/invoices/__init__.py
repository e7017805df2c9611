"""Invoices issued against signed quotes."""
