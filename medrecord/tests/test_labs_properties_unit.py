from medrecord.labs.properties import load_properties, property_by_key, property_by_loinc, search_properties
from medrecord.utils.strings import remove_non_alphanumeric, search_optimize


def test_catalogue_sorted_by_term() -> None:
    terms = [p.term.lower() for p in load_properties()]
    assert terms == sorted(terms)


def test_property_lookup_by_key_and_loinc() -> None:
    hemoglobin = property_by_key("  Hemoglobin ")
    assert hemoglobin is not None
    assert hemoglobin.loinc_code == "718-7"
    assert property_by_loinc("718-7") == hemoglobin
    assert property_by_key("") is None
    assert property_by_key("unknown-thing") is None


def test_property_without_loinc_is_indexed_by_key() -> None:
    prop = property_by_loinc("oxygen_saturation")
    assert prop is not None
    assert prop.key == "oxygen_saturation"
    assert property_by_loinc("unknown") is None


def test_search_is_case_and_diacritics_insensitive() -> None:
    keys = [p.key for p in search_properties("CHOLÉSTEROL")]
    assert "cholesterol" in keys
    assert "hdl cholesterol" in keys
    assert len(search_properties("o", limit=3)) == 3


def test_string_helpers() -> None:
    assert search_optimize("Žlučník") == "zlucnik"
    assert remove_non_alphanumeric("A-1 b_2!") == "A1b2"
