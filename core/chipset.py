"""
Chipset Classification Module
Maps raw platform/hardware strings to a vendor and marketing model name.
"""

import re
from typing import Callable, Optional

from .models import ChipBrand, ChipsetFact, UNKNOWN

# Placeholder used when no source string was available
UNKNOWN_PROCESSOR = "unknown processor"

# Legacy MSM platform codes -> Snapdragon marketing name
MSM_TO_SNAPDRAGON = {
    '8998': '835',
    '8996': '820/821',
    '8994': '810',
    '8992': '808',
    '8974': '801',
    '8960': 'S4 Pro',
    '8660': 'S3',
    '8255': 'S2',
    '7227': 'S1',
}

# Current SM platform codes -> Snapdragon marketing name
SM_TO_SNAPDRAGON = {
    '8750': '8 Elite Gen 1',
    '8650': '8 Gen 3',
    '8550': '8 Gen 2',
    '8475': '8+ Gen 1',
    '8450': '8 Gen 1',
    '8350': '888',
    '8250': '865',
    '8150': '855',
    '7325': '778G',
    '7225': '750G',
    '6375': '695',
    '6350': '690',
}

# Board codenames reported by ro.board.platform on recent Qualcomm devices
QUALCOMM_CODENAMES = [
    ('sun', 'Snapdragon 8 Elite Gen 1 (sun)'),
    ('pineapple', 'Snapdragon 8 Gen 3 (pineapple)'),
    ('kalama', 'Snapdragon 8 Gen 2 (kalama)'),
    ('taro', 'Snapdragon 8 Gen 1 (taro)'),
    ('lahaina', 'Snapdragon 888 (lahaina)'),
    ('kona', 'Snapdragon 865 (kona)'),
]

# Vendor signatures, tested in order; the first match selects the vendor.
# 'sm' and 'mt' also match bare platform codes such as sm8450 or mt6893.
VENDOR_KEYWORDS = [
    (ChipBrand.QUALCOMM, ('qualcomm', 'snapdragon', 'qcom', 'msm', 'sdm', 'sm',
                          'kona', 'lahaina', 'taro', 'kalama', 'pineapple')),
    (ChipBrand.MEDIATEK, ('mediatek', 'mtk', 'mt')),
    (ChipBrand.HISILICON, ('hisilicon', 'kirin')),
    (ChipBrand.SAMSUNG, ('exynos',)),
    (ChipBrand.UNISOC, ('unisoc', 'spreadtrum')),
]

Rule = tuple[re.Pattern, Callable[[re.Match], str]]


def _lookup(table: dict[str, str], prefix: str) -> Callable[[re.Match], str]:
    def fmt(match: re.Match) -> str:
        code = match.group(1)
        name = table.get(code)
        return f"Snapdragon {name}" if name else f"{prefix}{code}"
    return fmt


QUALCOMM_RULES: list[Rule] = [
    (re.compile(r'snapdragon\s*(\d+\+?)\s*gen\s*(\d+)'),
     lambda m: f"Snapdragon {m.group(1)} Gen {m.group(2)}"),
    (re.compile(r'snapdragon\s*(\d+[a-z]?)'), lambda m: f"Snapdragon {m.group(1).upper()}"),
    (re.compile(r'msm(\d+)'), _lookup(MSM_TO_SNAPDRAGON, "MSM")),
    (re.compile(r'sdm(\d+)'), lambda m: f"Snapdragon {m.group(1)}"),
    (re.compile(r'sm(\d+)'), _lookup(SM_TO_SNAPDRAGON, "SM")),
]

MEDIATEK_RULES: list[Rule] = [
    (re.compile(r'dimensity\s*(\d+)'), lambda m: f"Dimensity {m.group(1)}"),
    (re.compile(r'helio\s*([a-z]\d+)'), lambda m: f"Helio {m.group(1).upper()}"),
    (re.compile(r'mt(\d+)'), lambda m: f"MT{m.group(1)}"),
]

HISILICON_RULES: list[Rule] = [
    (re.compile(r'kirin\s*(\d+)'), lambda m: f"Kirin {m.group(1)}"),
]

SAMSUNG_RULES: list[Rule] = [
    (re.compile(r'exynos\s*(\d+)'), lambda m: f"Exynos {m.group(1)}"),
]

UNISOC_RULES: list[Rule] = [
    (re.compile(r'tiger\s*(t\d+)'), lambda m: f"Tiger {m.group(1).upper()}"),
    (re.compile(r'sc(\d+)'), lambda m: f"SC{m.group(1)}"),
]

VENDOR_RULES = {
    ChipBrand.QUALCOMM: QUALCOMM_RULES,
    ChipBrand.MEDIATEK: MEDIATEK_RULES,
    ChipBrand.HISILICON: HISILICON_RULES,
    ChipBrand.SAMSUNG: SAMSUNG_RULES,
    ChipBrand.UNISOC: UNISOC_RULES,
}

# Family names shown when a vendor keyword matched but no model number did
VENDOR_FAMILIES = {
    ChipBrand.QUALCOMM: [('snapdragon', 'Snapdragon'), ('msm', 'MSM'), ('sdm', 'SDM'), ('sm', 'SM')],
    ChipBrand.MEDIATEK: [('dimensity', 'Dimensity'), ('helio', 'Helio'), ('mt', 'MT')],
    ChipBrand.HISILICON: [('kirin', 'Kirin')],
    ChipBrand.SAMSUNG: [('exynos', 'Exynos')],
    ChipBrand.UNISOC: [('tiger', 'Tiger'), ('sc', 'SC')],
}


def detect_vendor(lowered: str) -> Optional[ChipBrand]:
    """Return the first vendor whose keyword occurs in the string."""
    for brand, keywords in VENDOR_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return brand
    return None


def _vendor_model(brand: ChipBrand, lowered: str) -> str:
    for pattern, fmt in VENDOR_RULES[brand]:
        match = pattern.search(lowered)
        if match:
            return fmt(match)

    if brand is ChipBrand.QUALCOMM:
        for codename, name in QUALCOMM_CODENAMES:
            if codename in lowered:
                return name

    for keyword, family in VENDOR_FAMILIES[brand]:
        if keyword in lowered:
            return f"{family} processor"
    return "processor"


def classify_chipset(raw: str) -> ChipsetFact:
    """
    Classify a raw chipset string.

    Total and side-effect free: every input, including the empty string,
    yields a ChipsetFact.

    Examples:
        >>> classify_chipset("SM8450")
        ChipsetFact(brand=<ChipBrand.QUALCOMM: 'Qualcomm'>, model='Snapdragon 8 Gen 1')
        >>> classify_chipset("MT6889").model
        'MT6889'
    """
    raw = raw or ""
    lowered = raw.lower()

    brand = detect_vendor(lowered)
    if brand is not None:
        return ChipsetFact(brand, _vendor_model(brand, lowered))

    residue = re.sub(r'[^a-zA-Z0-9\s]', '', raw).strip()
    if residue and residue.lower() != UNKNOWN_PROCESSOR:
        return ChipsetFact(ChipBrand.UNKNOWN, residue)
    return ChipsetFact(ChipBrand.UNKNOWN, UNKNOWN)


def pick_chipset_source(*candidates: Optional[str]) -> str:
    """
    Choose the raw string to classify.

    Candidates are given in priority order (platform, hardware, chip name,
    cpuinfo model line); the first non-empty value other than "unknown" wins.
    """
    for candidate in candidates:
        value = (candidate or "").strip()
        if value and value.lower() != "unknown":
            return value
    return UNKNOWN_PROCESSOR
