import pytest

from casejobs.courts import (
    CourtResolver,
    detect_city_and_district,
    import_courts,
    read_court_list,
    write_court_list,
)
from casejobs.errors import MissingPrecondition
from casejobs.models import CourtEntry


def build_registry():
    return [
        CourtEntry(id=1, name="11. Asliye Hukuk Mahkemesi", city="Antalya"),
        CourtEntry(id=2, name="Antalya 5. Aile Mahkemesi", city="Antalya"),
        CourtEntry(id=3, name="Korkuteli Asliye Hukuk Mahkemesi", city="Antalya", district="Korkuteli"),
    ]


def test_exact_match_on_display_name():
    match = CourtResolver(build_registry()).resolve("11. Asliye Hukuk Mahkemesi")
    assert match.court.id == 1
    assert match.method == "exact"
    assert match.score == 100


def test_contains_match_for_variant_spelling():
    resolver = CourtResolver(build_registry())
    variant = resolver.resolve("11. ASLİYE HUKUK MAHKEMESİ")
    assert variant.court.id == 1
    assert variant.method == "contains"

    prefixed = resolver.resolve("5. Aile Mahkemesi")
    assert prefixed.court.id == 2


def test_contains_match_respects_word_boundaries_and_order():
    resolver = CourtResolver(build_registry())
    assert resolver.resolve("1. Asliye Hukuk Mahkemesi") is None
    # both 1 and 3 contain it; registry order wins
    assert resolver.resolve("Asliye Hukuk Mahkemesi").court.id == 1


def test_best_similarity_strategy():
    resolver = CourtResolver(build_registry(), strategy="best-similarity")
    match = resolver.resolve("Asliye Hukuk Mahkemesi")
    assert match.court.id == 1
    assert match.method == "similarity"
    assert match.score == 88
    assert resolver.resolve("Korkuteli Asliye Hukuk Mahkemesı").court.id == 3


def test_unresolved_and_invalid_strategy():
    for strategy in ("first-contains", "best-similarity"):
        resolver = CourtResolver(build_registry(), strategy=strategy)
        assert resolver.resolve("Vergi Dairesi Başkanlığı") is None
        assert resolver.resolve("") is None
    with pytest.raises(ValueError):
        CourtResolver(build_registry(), strategy="closest")


def test_add_extends_snapshot():
    resolver = CourtResolver(build_registry())
    assert resolver.resolve("Tüketici Mahkemesi") is None
    resolver.add(CourtEntry(id=9, name="Tüketici Mahkemesi", city="Bilinmiyor"))
    assert resolver.resolve("Tüketici Mahkemesi").court.id == 9


def test_detect_city_and_district():
    assert detect_city_and_district("Korkuteli Asliye Hukuk Mahkemesi") == ("Antalya", "Korkuteli")
    assert detect_city_and_district("5. Aile Mahkemesi") == ("Antalya", None)
    assert detect_city_and_district("Elmalı Sulh Ceza", "Antalya", ("Elmalı",)) == ("Antalya", "Elmalı")


def test_court_list_round_trip(tmp_path):
    target = write_court_list(tmp_path / "courts.md", ["5. Aile Mahkemesi", "11. Asliye Hukuk Mahkemesi", "5. Aile Mahkemesi"])
    content = target.read_text(encoding="utf-8")
    assert "1. 11. Asliye Hukuk Mahkemesi" in content
    assert "2. 5. Aile Mahkemesi" in content
    assert read_court_list(target) == ["11. Asliye Hukuk Mahkemesi", "5. Aile Mahkemesi"]


def test_read_court_list_ignores_other_lines(tmp_path):
    path = tmp_path / "list.md"
    path.write_text("# Mahkemeler\n\nToplam: 2\n1. 5. Aile Mahkemesi\n- not numbered\n2.   Korkuteli Asliye Hukuk Mahkemesi \n", encoding="utf-8")
    assert read_court_list(path) == ["5. Aile Mahkemesi", "Korkuteli Asliye Hukuk Mahkemesi"]
    with pytest.raises(MissingPrecondition):
        read_court_list(tmp_path / "missing.md")


def test_import_courts_skips_existing_names(store):
    names = ["5. Aile Mahkemesi", "Korkuteli Asliye Hukuk Mahkemesi", "5. Aile Mahkemesi"]
    result = import_courts(store, names)
    assert result.created == ["5. Aile Mahkemesi", "Korkuteli Asliye Hukuk Mahkemesi"]
    assert result.existing == ["5. Aile Mahkemesi"]
    assert store.find_one("courts", name="Korkuteli Asliye Hukuk Mahkemesi")["district"] == "Korkuteli"

    again = import_courts(store, names)
    assert again.created == []
    assert store.count("courts") == 2
