"""Dispatch books: searchable list of dispatch records and the printable dispatch document."""
