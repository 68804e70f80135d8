# -*- coding: utf-8 -*-
"""
Body composition formulas

Skinfold / tape body-fat estimates, lean/fat mass split and Mifflin-St Jeor BMR.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple


class BodyFatMethod(str, Enum):
    """Body-fat calculation methods stored in `athlete_measurements.calculation_method`."""
    jackson_pollock_3 = "jackson_pollock_3"
    jackson_pollock_4 = "jackson_pollock_4"
    jackson_pollock_7 = "jackson_pollock_7"
    durnin_womersley = "durnin_womersley"
    parrillo = "parrillo"
    navy_tape = "navy_tape"


class Goal(str, Enum):
    maintenance = "maintenance"
    bulking = "bulking"
    cutting = "cutting"


ACTIVITY_LEVELS: Dict[str, float] = {
    "sedentary": 1.2,
    "light": 1.375,
    "moderate": 1.55,
    "active": 1.725,
    "very_active": 1.9,
    "extreme": 2.0,
}

# g/kg bodyweight (protein, fat) per goal
GOAL_MULTIPLIERS: Dict[Goal, Tuple[float, float]] = {
    Goal.maintenance: (1.8, 0.7),
    Goal.bulking: (2.0, 1.0),
    Goal.cutting: (2.4, 0.4),
}

GOAL_CALORIE_FACTOR: Dict[Goal, float] = {
    Goal.maintenance: 1.0,
    Goal.bulking: 1.10,
    Goal.cutting: 0.80,
}

# Durnin-Womersley (upper age bound exclusive, c, m)
_DW_MALE = ((17, 1.1533, 0.0643), (20, 1.1620, 0.0630), (30, 1.1631, 0.0632),
            (40, 1.1422, 0.0544), (50, 1.1620, 0.0700), (None, 1.1715, 0.0779))
_DW_FEMALE = ((17, 1.1369, 0.0598), (20, 1.1549, 0.0678), (30, 1.1599, 0.0717),
              (40, 1.1423, 0.0632), (50, 1.1333, 0.0612), (None, 1.1339, 0.0645))


class MissingInputError(ValueError):
    """A formula was called without the sites it needs."""


@dataclass
class BodyComposition:
    lean_mass_kg: float
    fat_mass_kg: float


def _round1(value: float) -> float:
    return round(value, 1)


def _is_male(gender: str) -> bool:
    return str(gender).lower() == "male"


def siri(body_density: float) -> float:
    """
    Body density -> body fat %

    Reference:
        Siri WE. Body composition from fluid spaces and density. 1961.
    """
    return _round1(495 / body_density - 450)


def _jp_density(gender: str, age: float, total: float) -> float:
    if _is_male(gender):
        return 1.10938 - 0.0008267 * total + 0.0000016 * total * total - 0.0002574 * age
    return 1.0994921 - 0.0009929 * total + 0.0000023 * total * total - 0.0001392 * age


def jackson_pollock_3(gender: str, age: float, site1_mm: float, site2_mm: float, thigh_mm: float) -> float:
    """
    Jackson-Pollock 3-site body fat %

    Args:
        gender: "male" or "female"
        age: years
        site1_mm, site2_mm: chest + abdominal (male) / tricep + suprailiac (female)
        thigh_mm: thigh skinfold

    Reference:
        Jackson AS, Pollock ML. Generalized equations for predicting body density of men. 1978.
    """
    return siri(_jp_density(gender, age, site1_mm + site2_mm + thigh_mm))


def jackson_pollock_4(
    gender: str,
    age: float,
    abdominal_mm: float,
    suprailiac_mm: float,
    tricep_mm: float,
    thigh_mm: float,
) -> float:
    return siri(_jp_density(gender, age, abdominal_mm + suprailiac_mm + tricep_mm + thigh_mm))


def jackson_pollock_7(
    gender: str,
    age: float,
    chest_mm: float,
    midaxillary_mm: float,
    tricep_mm: float,
    subscapular_mm: float,
    abdominal_mm: float,
    suprailiac_mm: float,
    thigh_mm: float,
) -> float:
    total = chest_mm + midaxillary_mm + tricep_mm + subscapular_mm + abdominal_mm + suprailiac_mm + thigh_mm
    if _is_male(gender):
        density = 1.112 - 0.00043499 * total + 0.00000055 * total * total - 0.00028826 * age
    else:
        density = 1.097 - 0.00046971 * total + 0.00000056 * total * total - 0.00012828 * age
    return siri(density)


def durnin_womersley_constants(gender: str, age: float) -> Tuple[float, float]:
    table = _DW_MALE if _is_male(gender) else _DW_FEMALE
    for upper, c, m in table[:-1]:
        if age < upper:
            return c, m
    return table[-1][1], table[-1][2]


def durnin_womersley(
    gender: str,
    age: float,
    bicep_mm: float,
    tricep_mm: float,
    subscapular_mm: float,
    suprailiac_mm: float,
) -> float:
    """
    Durnin-Womersley 4-site body fat %

    Reference:
        Durnin JV, Womersley J. Body fat assessed from total body density. 1974.
    """
    total = bicep_mm + tricep_mm + subscapular_mm + suprailiac_mm
    if total <= 0:
        raise MissingInputError("Skinfold sum must be positive")
    c, m = durnin_womersley_constants(gender, age)
    return siri(c - m * math.log10(total))


def parrillo(gender: str, *sites_mm: float) -> float:
    """Nine-site Parrillo estimate: sum x 0.27 (+10 for women)."""
    total = sum(sites_mm)
    value = total * 0.27
    if not _is_male(gender):
        value += 10
    return _round1(value)


def navy_tape(
    gender: str,
    height_cm: float,
    neck_cm: float,
    waist_cm: float,
    hips_cm: Optional[float] = None,
) -> float:
    """
    US Navy circumference method

    Raises:
        MissingInputError: female without a hip measurement
    """
    if _is_male(gender):
        value = 495 / (1.0324 - 0.19077 * math.log10(waist_cm - neck_cm) + 0.15456 * math.log10(height_cm)) - 450
    else:
        if not hips_cm:
            raise MissingInputError("Hip measurement required for females using Navy Tape method")
        value = (
            495 / (1.29579 - 0.35004 * math.log10(waist_cm + hips_cm - neck_cm) + 0.22100 * math.log10(height_cm))
            - 450
        )
    return _round1(value)


def body_composition(weight_kg: float, body_fat_percentage: float) -> BodyComposition:
    fat_mass = body_fat_percentage / 100 * weight_kg
    lean_mass = weight_kg - fat_mass
    return BodyComposition(lean_mass_kg=_round1(lean_mass), fat_mass_kg=_round1(fat_mass))


def mifflin_st_jeor(gender: str, weight_kg: float, height_cm: float, age: float) -> int:
    """
    Mifflin-St Jeor BMR (kcal/day, rounded)

    Reference:
        Mifflin MD, St Jeor ST, et al. Am J Clin Nutr. 1990.
    """
    bmr = 10 * weight_kg + 6.25 * height_cm - 5 * age
    bmr += 5 if _is_male(gender) else -161
    return int(round(bmr))


def energy_targets(
    bmr: float,
    weight_kg: float,
    *,
    activity_factor: float = 1.2,
    goal: Goal = Goal.maintenance,
    protein_g_per_kg: Optional[float] = None,
    fat_g_per_kg: Optional[float] = None,
) -> Dict[str, float]:
    """TDEE, goal-adjusted calorie target and the protein/fat/carb split that fills it."""
    default_protein, default_fat = GOAL_MULTIPLIERS[goal]
    protein_mult = default_protein if protein_g_per_kg is None else protein_g_per_kg
    fat_mult = default_fat if fat_g_per_kg is None else fat_g_per_kg

    tdee = bmr * activity_factor
    target = tdee * GOAL_CALORIE_FACTOR[goal]
    protein_g = weight_kg * protein_mult
    fat_g = weight_kg * fat_mult
    carb_g = (target - (protein_g * 4 + fat_g * 9)) / 4
    return {
        "tdee": round(tdee),
        "calorie_target": round(target),
        "protein_g": round(protein_g, 1),
        "fat_g": round(fat_g, 1),
        "carb_g": round(carb_g, 1),
        "protein_g_per_kg": protein_mult,
        "fat_g_per_kg": fat_mult,
        "carb_g_per_kg": round(carb_g / weight_kg, 2) if weight_kg else 0.0,
    }


_REQUIRED_SITES: Dict[BodyFatMethod, Tuple[str, ...]] = {
    BodyFatMethod.jackson_pollock_4: ("abdominal_mm", "suprailiac_mm", "tricep_mm", "thigh_mm"),
    BodyFatMethod.jackson_pollock_7: (
        "chest_mm", "midaxillary_mm", "tricep_mm", "subscapular_mm", "abdominal_mm", "suprailiac_mm", "thigh_mm",
    ),
    BodyFatMethod.durnin_womersley: ("bicep_mm", "tricep_mm", "subscapular_mm", "suprailiac_mm"),
    BodyFatMethod.parrillo: (
        "chest_mm", "abdominal_mm", "thigh_mm", "bicep_mm", "tricep_mm",
        "subscapular_mm", "suprailiac_mm", "lower_back_mm", "calf_mm",
    ),
    BodyFatMethod.navy_tape: ("neck_cm", "waist_cm"),
}


def required_sites(method: BodyFatMethod, gender: str) -> Tuple[str, ...]:
    if method == BodyFatMethod.jackson_pollock_3:
        if _is_male(gender):
            return ("chest_mm", "abdominal_mm", "thigh_mm")
        return ("tricep_mm", "suprailiac_mm", "thigh_mm")
    return _REQUIRED_SITES[method]


def compute_body_fat(
    method: BodyFatMethod,
    gender: str,
    age: float,
    sites: Mapping[str, Any],
    *,
    height_cm: Optional[float] = None,
) -> float:
    """Dispatch to one formula; missing sites raise MissingInputError naming them."""
    needed = required_sites(method, gender)
    missing = [key for key in needed if not sites.get(key)]
    if missing:
        raise MissingInputError(f"Missing measurements for {method.value}: {', '.join(missing)}")
    v = {key: float(sites[key]) for key in needed}

    if method == BodyFatMethod.jackson_pollock_3:
        a, b, thigh = (v[k] for k in needed)
        return jackson_pollock_3(gender, age, a, b, thigh)
    if method == BodyFatMethod.jackson_pollock_4:
        return jackson_pollock_4(gender, age, v["abdominal_mm"], v["suprailiac_mm"], v["tricep_mm"], v["thigh_mm"])
    if method == BodyFatMethod.jackson_pollock_7:
        return jackson_pollock_7(
            gender, age, v["chest_mm"], v["midaxillary_mm"], v["tricep_mm"], v["subscapular_mm"],
            v["abdominal_mm"], v["suprailiac_mm"], v["thigh_mm"],
        )
    if method == BodyFatMethod.durnin_womersley:
        return durnin_womersley(gender, age, v["bicep_mm"], v["tricep_mm"], v["subscapular_mm"], v["suprailiac_mm"])
    if method == BodyFatMethod.parrillo:
        return parrillo(gender, *(v[k] for k in needed))
    if method == BodyFatMethod.navy_tape:
        if not height_cm:
            raise MissingInputError("Height is required for the Navy Tape method")
        hips = sites.get("hips_cm")
        return navy_tape(gender, float(height_cm), v["neck_cm"], v["waist_cm"], float(hips) if hips else None)
    raise MissingInputError(f"Unsupported method: {method}")
