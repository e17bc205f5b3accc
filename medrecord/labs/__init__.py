"""
Lab terminology boundary.

Design intent:
- Normalize local lab test names to canonical English terms.
- Keep the property catalogue (units, LOINC, reference limits) as static data.
"""
from .properties import Property, property_by_key, property_by_loinc, search_properties
from .synonyms import load_synonym_table, synonyms

__all__ = [
    "Property",
    "load_synonym_table",
    "property_by_key",
    "property_by_loinc",
    "search_properties",
    "synonyms",
]
