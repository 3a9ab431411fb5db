"""等方熱弾性材料データと弾性テンソル・von Mises 応力.

Voigt 表記:
  平面応力: σ = [σxx, σyy, τxy],            ε = [εxx, εyy, γxy]
  3D:       σ = [σxx, σyy, σzz, τyz, τxz, τxy], ε = [εxx, εyy, εzz, γyz, γxz, γxy]
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class MaterialProperties:
    """等方熱弾性材料の物性値.

    Attributes:
        rho: 密度 [kg/m³]
        specific_heat: 比熱 [J/(kg·K)]
        E: ヤング率 [Pa]
        nu: ポアソン比
        ys: 降伏応力 [Pa]（破損指標の正規化）
        alpha: 線膨張係数 [1/K]
        kappa: 熱伝導率 [W/(m·K)]
    """

    rho: float = 2700.0
    specific_heat: float = 921.0
    E: float = 70e9
    nu: float = 0.3
    ys: float = 270e6
    alpha: float = 24e-6
    kappa: float = 230.0

    def __post_init__(self) -> None:
        if self.rho < 0:
            raise ValueError(f"rho は非負: {self.rho}")
        if self.specific_heat < 0:
            raise ValueError(f"specific_heat は非負: {self.specific_heat}")
        if self.E <= 0:
            raise ValueError(f"E は正値: {self.E}")
        if not (-1.0 < self.nu < 0.5):
            raise ValueError(f"nu は (-1, 0.5): {self.nu}")
        if self.ys <= 0:
            raise ValueError(f"ys は正値: {self.ys}")
        if self.kappa < 0:
            raise ValueError(f"kappa は非負: {self.kappa}")


def constitutive_plane_stress(E: float, nu: float) -> np.ndarray:
    """平面応力の弾性マトリクス D (3×3) を返す.

    Args:
        E: ヤング率
        nu: ポアソン比

    Returns:
        D: (3, 3) 弾性マトリクス
    """
    c = E / (1.0 - nu * nu)
    return np.array(
        [[c, c * nu, 0.0], [c * nu, c, 0.0], [0.0, 0.0, 0.5 * E / (1.0 + nu)]],
        dtype=float,
    )


def constitutive_3d(E: float, nu: float) -> np.ndarray:
    """3D 等方弾性テンソル D (6×6) を返す.

    Args:
        E: ヤング率
        nu: ポアソン比

    Returns:
        D: (6, 6) 弾性テンソル
    """
    lam = E * nu / ((1.0 + nu) * (1.0 - 2.0 * nu))
    mu = E / (2.0 * (1.0 + nu))
    D = np.zeros((6, 6), dtype=float)
    # 法線成分
    D[0, 0] = D[1, 1] = D[2, 2] = lam + 2.0 * mu
    D[0, 1] = D[0, 2] = D[1, 0] = D[1, 2] = D[2, 0] = D[2, 1] = lam
    # せん断成分
    D[3, 3] = D[4, 4] = D[5, 5] = mu
    return D


# ============================================================
# von Mises 応力
# ============================================================


def von_mises_2d(s: np.ndarray) -> float:
    """平面応力の von Mises 応力."""
    return float(np.sqrt(s[0] * s[0] + s[1] * s[1] - s[0] * s[1] + 3.0 * s[2] * s[2]))


def von_mises_2d_sens(s: np.ndarray) -> tuple[float, np.ndarray]:
    """平面応力の von Mises 応力と d σ_vm / d σ."""
    vm = von_mises_2d(s)
    dvm = np.zeros(3)
    if vm != 0.0:
        dvm[0] = (2.0 * s[0] - s[1]) / (2.0 * vm)
        dvm[1] = (2.0 * s[1] - s[0]) / (2.0 * vm)
        dvm[2] = 3.0 * s[2] / vm
    return vm, dvm


def von_mises_3d(s: np.ndarray) -> float:
    """3D の von Mises 応力."""
    return float(
        np.sqrt(
            0.5 * ((s[0] - s[1]) ** 2 + (s[1] - s[2]) ** 2 + (s[2] - s[0]) ** 2)
            + 3.0 * (s[3] * s[3] + s[4] * s[4] + s[5] * s[5])
        )
    )


def von_mises_3d_sens(s: np.ndarray) -> tuple[float, np.ndarray]:
    """3D の von Mises 応力と d σ_vm / d σ."""
    vm = von_mises_3d(s)
    dvm = np.zeros(6)
    if vm != 0.0:
        dvm[0] = (2.0 * s[0] - s[1] - s[2]) / (2.0 * vm)
        dvm[1] = (2.0 * s[1] - s[0] - s[2]) / (2.0 * vm)
        dvm[2] = (2.0 * s[2] - s[0] - s[1]) / (2.0 * vm)
        dvm[3:] = 3.0 * s[3:] / vm
    return vm, dvm
