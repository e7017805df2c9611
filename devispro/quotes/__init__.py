"""Quote persistence: row mapping, numbering sequences, services, queries."""
