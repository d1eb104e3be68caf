from casejobs.models import CandidateMatch
from casejobs.parsing import DescriptionParser, is_court_payment, parse_description


SALES_OFFICE = (
    "GELEN EFT - ANTALYA MAHKEMELER VEZNESİ - Antalya 2. (Sulh Hukuk Mah.) Satış Memu-2024/38 Satış-RAMAZAN ÇATAL"
)


def test_parse_strips_markers_city_and_payer():
    assert parse_description(SALES_OFFICE) == CandidateMatch(
        court_name="2. (Sulh Hukuk Mah.) Satış Memu", file_number="2024/38"
    )


def test_parse_case_kinds():
    parser = DescriptionParser()
    family = parser.parse(
        "GELEN EFT - ANTALYA MAHKEMELER VEZNESİ - Antalya 5. Aile Mahkemesi-2023/770 Esas-RAMAZAN ÇATAL"
    )
    assert family == CandidateMatch("5. Aile Mahkemesi", "2023/770")

    misc = parser.parse("GELEN FAST - ANTALYA MAHKEMELER VEZNESİ - Antalya 1. Sulh Hukuk Mahkemesi-2024/55 D.İş")
    assert misc == CandidateMatch("1. Sulh Hukuk Mahkemesi", "2024/55")

    regional = parser.parse(
        "GELEN EFT - ANTALYA BÖLGE ADLİYE MAHKEMESİ VEZNESİ - Antalya 11. Asliye Hukuk Mahkemesi-2024/1205 Talimat"
    )
    assert regional == CandidateMatch("11. Asliye Hukuk Mahkemesi", "2024/1205")


def test_loose_fallback_without_case_kind():
    description = "GELEN HAVALE - ANTALYA MAHKEMELER VEZNESİ - Antalya 3. İş Mahkemesi-2021/15"
    assert DescriptionParser().parse(description) == CandidateMatch("3. İş Mahkemesi", "2021/15")
    assert DescriptionParser(strict=True).parse(description) is None


def test_configured_city_prefix():
    parser = DescriptionParser(city_prefixes=("Korkuteli",))
    korkuteli = "GELEN EFT - ANTALYA MAHKEMELER VEZNESİ - Korkuteli Asliye Hukuk Mahkemesi-2020/3 Esas"
    assert parser.parse(korkuteli) == CandidateMatch("Asliye Hukuk Mahkemesi", "2020/3")
    # Antalya is no longer a prefix for this parser
    antalya = "GELEN EFT - ANTALYA MAHKEMELER VEZNESİ - Antalya 5. Aile Mahkemesi-2023/770 Esas"
    assert parser.parse(antalya).court_name == "Antalya 5. Aile Mahkemesi"


def test_parse_requires_cashier_marker():
    parser = DescriptionParser()
    assert parser.parse("Antalya 5. Aile Mahkemesi-2023/770 Esas-RAMAZAN ÇATAL") is None
    assert parser.parse("GELEN EFT - Antalya 5. Aile Mahkemesi-2023/770 Esas") is None
    assert parse_description("KİRA ÖDEMESİ - Daire 3-2024/12 Esas") is None
    assert DescriptionParser(strict=True).parse("Antalya 1. Sulh Hukuk Mahkemesi-2024/55 D.İş") is None


def test_parse_never_raises():
    parser = DescriptionParser()
    assert parser.parse(None) is None
    assert parser.parse(12345) is None
    assert parser.parse("") is None
    assert parser.parse("   ") is None
    assert parser.parse("GELEN EFT - ANTALYA MAHKEMELER VEZNESİ - harç iadesi") is None


def test_is_court_payment():
    assert is_court_payment(SALES_OFFICE)
    assert is_court_payment("GELEN EFT - ANTALYA İDARE MAHKEMESİ - 2. İdare Mahkemesi-2023/1 Esas")
    assert is_court_payment("GELEN EFT - ANTALYA BÖLGE ADLİYE MAHKEMESİ VEZNESİ - 3. Hukuk Dairesi-2022/9 Esas")
    assert not is_court_payment("MARKET ALIŞVERİŞİ")
    assert not is_court_payment(None)
    assert not is_court_payment(1440.0)
