"""Adaptateurs : API fournisseur, corbeille locale, interface CLI."""
