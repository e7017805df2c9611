"""Quote documents: French formatting, document assembly, Jinja2 rendering."""
