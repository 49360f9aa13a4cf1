"""Per-source adapters turning inbound payment files into normalized transactions."""
