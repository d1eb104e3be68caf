"""Build a sample bank statement workbook in the bank's export layout."""
from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Sequence

from openpyxl import Workbook

HEADER_BLOCK: List[List[object]] = [
    ["HESAP HAREKETLERİ"],
    ["Hesap Türü", "Vadesiz TL"],
    ["Müşteri Adı", "RAMAZAN ÇATAL"],
    ["Şube", "ANTALYA"],
    ["Hesap No", "0000000-1"],
    ["IBAN", "TR00 0000 0000 0000 0000 0000 00"],
    ["Para Birimi", "TL"],
    ["Başlangıç Tarihi", "01/01/2025"],
    ["Bitiş Tarihi", "31/01/2025"],
    ["Dönem", "Ocak 2025"],
    ["Açılış Bakiyesi", "0.00"],
    ["Tarih", "Saat", "Kanal", "İşlem", "Dekont No", "Açıklama", "Tutar", "Bakiye"],
]

DATA_ROWS: List[List[object]] = [
    [
        "13/01/2025",
        "10:42",
        "EFT",
        "Gelen",
        "REF0001",
        "GELEN EFT - ANTALYA MAHKEMELER VEZNESİ - Antalya 5. Aile Mahkemesi-2023/770 Esas-RAMAZAN ÇATAL",
        "1,440.00",
        "1,440.00",
    ],
    [
        "13/01/2025",
        "10:43",
        "EFT",
        "Gelen",
        "REF0002",
        "GELEN EFT - ANTALYA MAHKEMELER VEZNESİ - Antalya 5. Aile Mahkemesi-2022/342 Esas-RAMAZAN ÇATAL",
        "2,400.00",
        "3,840.00",
    ],
    [
        "15/01/2025",
        "09:05",
        "FAST",
        "Gelen",
        "REF0003",
        "GELEN FAST - ANTALYA MAHKEMELER VEZNESİ - Antalya 2. (Sulh Hukuk Mah.) Satış Memu-2024/38 Satış-RAMAZAN ÇATAL",
        "960.00",
        "4,800.00",
    ],
    [
        "16/01/2025",
        "14:30",
        "POS",
        "Giden",
        "REF0004",
        "MARKET ALIŞVERİŞİ",
        "-250.00",
        "4,550.00",
    ],
    [
        "17/01/2025",
        "11:15",
        "EFT",
        "Gelen",
        "REF0005",
        "GELEN EFT - ANTALYA BÖLGE ADLİYE MAHKEMESİ VEZNESİ - Antalya 11. Asliye Hukuk Mahkemesi-2024/1205 Talimat",
        "3,000.00",
        "7,550.00",
    ],
]


def build_workbook(rows: Optional[Sequence[Sequence[object]]] = None) -> Workbook:
    wb = Workbook()
    ws = wb.active
    ws.title = "Hesap Hareketleri"
    for header in HEADER_BLOCK:
        ws.append(list(header))
    for row in DATA_ROWS if rows is None else rows:
        ws.append(list(row))
    return wb


def write_sample_statement(target_path: Path, rows: Optional[Sequence[Sequence[object]]] = None) -> Path:
    target_path = Path(target_path)
    target_path.parent.mkdir(parents=True, exist_ok=True)
    wb = build_workbook(rows)
    wb.save(target_path)
    return target_path


__all__ = ["HEADER_BLOCK", "DATA_ROWS", "build_workbook", "write_sample_statement"]
