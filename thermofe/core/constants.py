"""要素・モデル間で共有する整数タグ空間.

アセンブラは多種の要素/モデルを一様にディスパッチするため、
行列種別・点量種別・出力フラグはプロセス全体で共通の整数として扱う。
未知のタグを受け取った側はゼロ出力で応答する（例外は投げない）。

定常フラグ（ビットマスク）:
  STEADY_STATE_MECHANICAL: 慣性項 ρ ü を落とす
  STEADY_STATE_THERMAL: 熱容量項 ρ c Ṫ を落とす
"""

from __future__ import annotations

from enum import Enum

# ============================================================
# 定常フラグ
# ============================================================

STEADY_STATE_MECHANICAL = 1
STEADY_STATE_THERMAL = 2


class StrainType(Enum):
    """ひずみ尺度の種別."""

    LINEAR = 0
    NONLINEAR = 1


# ============================================================
# 行列種別 (mat_type)
# ============================================================

JACOBIAN_MATRIX = 0
STIFFNESS_MATRIX = 1
MASS_MATRIX = 2
GEOMETRIC_STIFFNESS_MATRIX = 3
STIFFNESS_PRODUCT_DERIVATIVE = 4

# ============================================================
# 点量種別 (quantity_type)
# ============================================================

FAILURE_INDEX = 1
ELEMENT_DENSITY = 2
STRAIN_ENERGY_DENSITY = 4
HEAT_FLUX = 8
TEMPERATURE = 16
TOTAL_STRAIN_ENERGY_DENSITY = 32
ELEMENT_DISPLACEMENT = 64

# ============================================================
# 可視化出力 (write_flag / ElementType)
# ============================================================

OUTPUT_CONNECTIVITY = 1
OUTPUT_NODES = 2
OUTPUT_DISPLACEMENTS = 4
OUTPUT_STRAINS = 8
OUTPUT_STRESSES = 16
OUTPUT_EXTRAS = 32
OUTPUT_LOADS = 64

ELEMENT_NONE = 0
SCALAR_2D_ELEMENT = 1
SCALAR_3D_ELEMENT = 2
BEAM_OR_SHELL_ELEMENT = 3
PLANE_STRESS_ELEMENT = 4
SOLID_ELEMENT = 5


__all__ = [
    "STEADY_STATE_MECHANICAL",
    "STEADY_STATE_THERMAL",
    "StrainType",
    "JACOBIAN_MATRIX",
    "STIFFNESS_MATRIX",
    "MASS_MATRIX",
    "GEOMETRIC_STIFFNESS_MATRIX",
    "STIFFNESS_PRODUCT_DERIVATIVE",
    "FAILURE_INDEX",
    "ELEMENT_DENSITY",
    "STRAIN_ENERGY_DENSITY",
    "HEAT_FLUX",
    "TEMPERATURE",
    "TOTAL_STRAIN_ENERGY_DENSITY",
    "ELEMENT_DISPLACEMENT",
    "OUTPUT_CONNECTIVITY",
    "OUTPUT_NODES",
    "OUTPUT_DISPLACEMENTS",
    "OUTPUT_STRAINS",
    "OUTPUT_STRESSES",
    "OUTPUT_EXTRAS",
    "OUTPUT_LOADS",
    "ELEMENT_NONE",
    "SCALAR_2D_ELEMENT",
    "SCALAR_3D_ELEMENT",
    "BEAM_OR_SHELL_ELEMENT",
    "PLANE_STRESS_ELEMENT",
    "SOLID_ELEMENT",
]
