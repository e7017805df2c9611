"""Application events — in-process bus and audit trail."""
