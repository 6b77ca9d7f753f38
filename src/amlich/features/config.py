# src/amlich/features/config.py
"""
Feature-level configuration / constants.

- Can Chi stems and branches, zodiac animals
- month / day display names, moon phase bands
- cultural significance texts and holiday tables
- 24 tiết khí: index n = sun longitude // 15 (0 = Xuân Phân at 0 deg)

Everything user-facing is read through a LocaleTable so the strings can be
swapped without touching the algorithms.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple

# ============================================================
# Can Chi (sexagenary cycle)
# ============================================================

CAN: Tuple[str, ...] = ("Giáp", "Ất", "Bính", "Đinh", "Mậu", "Kỷ", "Canh", "Tân", "Nhâm", "Quý")

CHI: Tuple[str, ...] = (
    "Tý", "Sửu", "Dần", "Mão", "Thìn", "Tỵ",
    "Ngọ", "Mùi", "Thân", "Dậu", "Tuất", "Hợi",
)

# Mão is the Cat (not the Rabbit) in the Vietnamese zodiac
ZODIAC_ANIMALS: Tuple[str, ...] = (
    "Tý (Chuột)", "Sửu (Trâu)", "Dần (Hổ)", "Mão (Mèo)", "Thìn (Rồng)", "Tỵ (Rắn)",
    "Ngọ (Ngựa)", "Mùi (Dê)", "Thân (Khỉ)", "Dậu (Gà)", "Tuất (Chó)", "Hợi (Lợn)",
)

# ============================================================
# Month / day names
# ============================================================

LUNAR_MONTH_NAME_BY_MONTH_NO: Dict[int, str] = {
    1:  "Tháng Giêng",
    2:  "Tháng Hai",
    3:  "Tháng Ba",
    4:  "Tháng Tư",
    5:  "Tháng Năm",
    6:  "Tháng Sáu",
    7:  "Tháng Bảy",
    8:  "Tháng Tám",
    9:  "Tháng Chín",
    10: "Tháng Mười",
    11: "Tháng Mười Một",
    12: "Tháng Chạp",
}

LEAP_MONTH_SUFFIX = " nhuận"


def _default_day_names() -> Dict[int, str]:
    names = {d: f"Mồng {d}" for d in range(1, 11)}
    names.update({d: f"Ngày {d}" for d in range(11, 31)})
    names[15] = "Rằm"
    return names


# ============================================================
# Moon phase bands (by lunar day-of-month)
# ============================================================

# (first_day, last_day, key)
MOON_PHASE_BANDS: Tuple[Tuple[int, int, str], ...] = (
    (1, 1, "new_moon"),
    (2, 7, "waxing_crescent"),
    (8, 14, "waxing_gibbous"),
    (15, 15, "full_moon"),
    (16, 22, "waning_gibbous"),
    (23, 30, "waning_crescent"),
)

MOON_PHASE_LABELS: Dict[str, str] = {
    "new_moon": "Trăng non (Mồng 1)",
    "waxing_crescent": "Trăng lưỡi liềm (Trăng tăng)",
    "waxing_gibbous": "Trăng mập dần (Trăng tăng giá)",
    "full_moon": "Trăng tròn (Rằm)",
    "waning_gibbous": "Trăng khuyết (Trăng giảm)",
    "waning_crescent": "Trăng tàn (Trăng giảm dần)",
}

# ============================================================
# Cultural significance
#   (month, day) entries win over the day-only entries
# ============================================================

CULTURAL_SIGNIFICANCE_BY_MONTH_DAY: Dict[Tuple[int, int], str] = {
    (1, 1): "Tết Nguyên Đán - Tết cổ truyền của người Việt Nam",
    (8, 15): "Tết Trung Thu - Lễ hội đoàn viên và trăng rằm tháng 8",
}

CULTURAL_SIGNIFICANCE_BY_DAY: Dict[int, str] = {
    1: "Ngày Mồng 1 - Ngày đầu tháng âm lịch, thích hợp cho việc cúng lễ và khởi đầu việc mới",
    15: "Ngày Rằm - Ngày trăng tròn, thích hợp cho việc cúng tổ tiên và cầu nguyện",
}

# longer text for detail views; keyed by day band
# (first_day, last_day, text)
SIGNIFICANCE_TEXT_BANDS: Tuple[Tuple[int, int, str], ...] = (
    (1, 1, "Ngày Mồng 1 - Ngày đầu tháng âm lịch, thích hợp cho việc cúng lễ và khởi đầu việc mới. "
           "Đây là ngày tốt để cầu may mắn và thành công."),
    (15, 15, "Ngày Rằm - Ngày trăng tròn, thích hợp cho việc cúng tổ tiên và cầu nguyện. "
             "Đây là ngày thiêng liêng trong tâm linh người Việt."),
    (2, 5, "Đầu tháng âm lịch - Thời gian tốt để bắt đầu công việc mới và thực hiện các kế hoạch quan trọng."),
    (14, 16, "Giữa tháng âm lịch - Thời gian thiêng liêng, thích hợp cho việc cúng bái và tâm linh."),
)
SIGNIFICANCE_TEXT_DEFAULT = "Ngày bình thường trong tháng âm lịch."

# ============================================================
# Holidays
# ============================================================

# lunar (month, day); only matched in non-leap months
LUNAR_HOLIDAYS: Dict[Tuple[int, int], str] = {
    (1, 1): "Tết Nguyên Đán",
    (1, 15): "Tết Nguyên Tiêu",
    (3, 3): "Tết Hàn Thực",
    (3, 10): "Giỗ Tổ Hùng Vương",
    (5, 5): "Tết Đoan Ngọ",
    (7, 15): "Vu Lan (Xá tội vong nhân)",
    (8, 15): "Tết Trung Thu",
    (9, 9): "Tết Trọng Dương",
    (12, 23): "Ông Công Ông Táo về trời",
}

# Gregorian (month, day)
GREGORIAN_HOLIDAYS: Dict[Tuple[int, int], str] = {
    (1, 1): "Tết Dương lịch",
    (4, 30): "Giải phóng miền Nam",
    (5, 1): "Quốc tế Lao động",
    (9, 2): "Quốc khánh Việt Nam",
}

# ============================================================
# 24 tiết khí
#   n = (sun longitude // 15) % 24, n even -> trung khí (major term)
# ============================================================

SOLAR_TERMS: Tuple[Tuple[int, str], ...] = (
    (0,   "Xuân Phân"),
    (15,  "Thanh Minh"),
    (30,  "Cốc Vũ"),
    (45,  "Lập Hạ"),
    (60,  "Tiểu Mãn"),
    (75,  "Mang Chủng"),
    (90,  "Hạ Chí"),
    (105, "Tiểu Thử"),
    (120, "Đại Thử"),
    (135, "Lập Thu"),
    (150, "Xử Thử"),
    (165, "Bạch Lộ"),
    (180, "Thu Phân"),
    (195, "Hàn Lộ"),
    (210, "Sương Giáng"),
    (225, "Lập Đông"),
    (240, "Tiểu Tuyết"),
    (255, "Đại Tuyết"),
    (270, "Đông Chí"),
    (285, "Tiểu Hàn"),
    (300, "Đại Hàn"),
    (315, "Lập Xuân"),
    (330, "Vũ Thủy"),
    (345, "Kinh Trập"),
)


def solar_term_kind_from_n(n: int) -> str:
    """"trung_khi" if n is even (30-degree multiple), else "tiet_khi"."""
    return "trung_khi" if int(n) % 2 == 0 else "tiet_khi"


# ============================================================
# Locale table
# ============================================================

def _frozen(table) -> Mapping:
    return MappingProxyType(dict(table))


@dataclass(frozen=True)
class LocaleTable:
    """
    Every display string used by the features layer.

    Swap in another instance (e.g. for a different orthography) and pass it
    as locale=... to the feature functions; the calendar math never reads it.
    Lookup tables are stored as read-only copies.
    """
    stems: Tuple[str, ...] = CAN
    branches: Tuple[str, ...] = CHI
    zodiac_animals: Tuple[str, ...] = ZODIAC_ANIMALS
    month_names: Mapping[int, str] = field(
        default_factory=lambda: LUNAR_MONTH_NAME_BY_MONTH_NO, hash=False
    )
    leap_month_suffix: str = LEAP_MONTH_SUFFIX
    day_names: Mapping[int, str] = field(default_factory=_default_day_names, hash=False)
    moon_phase_labels: Mapping[str, str] = field(default_factory=lambda: MOON_PHASE_LABELS, hash=False)
    significance_by_month_day: Mapping[Tuple[int, int], str] = field(
        default_factory=lambda: CULTURAL_SIGNIFICANCE_BY_MONTH_DAY, hash=False
    )
    significance_by_day: Mapping[int, str] = field(
        default_factory=lambda: CULTURAL_SIGNIFICANCE_BY_DAY, hash=False
    )
    lunar_holidays: Mapping[Tuple[int, int], str] = field(default_factory=lambda: LUNAR_HOLIDAYS, hash=False)
    gregorian_holidays: Mapping[Tuple[int, int], str] = field(
        default_factory=lambda: GREGORIAN_HOLIDAYS, hash=False
    )
    solar_term_names: Tuple[str, ...] = tuple(name for _, name in SOLAR_TERMS)
    year_word: str = "năm"

    def __post_init__(self) -> None:
        for name in (
            "month_names",
            "day_names",
            "moon_phase_labels",
            "significance_by_month_day",
            "significance_by_day",
            "lunar_holidays",
            "gregorian_holidays",
        ):
            object.__setattr__(self, name, _frozen(getattr(self, name)))

    def month_name(self, month_no: int, is_leap: bool = False) -> str:
        m = int(month_no)
        try:
            base = self.month_names[m]
        except KeyError as e:
            raise ValueError(f"invalid lunar month_no: {month_no}") from e
        return f"{base}{self.leap_month_suffix}" if is_leap else base

    def day_name(self, day_no: int) -> str:
        d = int(day_no)
        try:
            return self.day_names[d]
        except KeyError as e:
            raise ValueError(f"invalid lunar day_no: {day_no}") from e

    def cycle_name(self, stem_index: int, branch_index: int) -> str:
        return f"{self.stems[stem_index % 10]} {self.branches[branch_index % 12]}"

    def moon_phase_label(self, key: str) -> str:
        return self.moon_phase_labels[key]

    def cultural_significance(self, month: int, day: int, is_leap: bool = False) -> Optional[str]:
        """Festival text for (month, day) in regular months only, else the per-day text."""
        if not is_leap:
            text = self.significance_by_month_day.get((int(month), int(day)))
            if text is not None:
                return text
        return self.significance_by_day.get(int(day))


DEFAULT_LOCALE = LocaleTable()
