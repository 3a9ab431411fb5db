"""等方熱弾性構成則（ThermoelasticConstitutiveProtocol 適合）.

設計変数は厚さ（体積分率）t の1つ。t_num < 0 のとき設計変数なし。
t は応力・密度・熱流束をスケールする。比熱と熱ひずみは t に依存しない。
破損指標は t でスケールしない材料応力 D·e から求める。

  s    = t D e
  q    = t κ ∇T
  ρ_t  = t ρ
  e_th = α θ [1, 1, (1,) 0, ...]
  fail = σ_vm(D e) / ys
"""

from __future__ import annotations

import numpy as np

from thermofe.core.results import FailureStrainSens
from thermofe.materials.elastic import (
    MaterialProperties,
    constitutive_3d,
    constitutive_plane_stress,
    von_mises_2d,
    von_mises_2d_sens,
    von_mises_3d,
    von_mises_3d_sens,
)


class _IsotropicThermoelastic:
    """平面応力/3D 共通の実装."""

    def __init__(
        self,
        props: MaterialProperties,
        D: np.ndarray,
        thermal_dir: np.ndarray,
        dim: int,
        t: float,
        t_num: int,
        t_lb: float,
        t_ub: float,
    ) -> None:
        if t_lb > t_ub:
            raise ValueError(f"t_lb <= t_ub が必要: t_lb={t_lb}, t_ub={t_ub}")
        self.props = props
        self.t = float(t)
        self.t_num = int(t_num)
        self.t_lb = float(t_lb)
        self.t_ub = float(t_ub)
        self._D = D
        self._thermal_dir = thermal_dir
        self._dim = dim

    def get_num_stresses(self) -> int:
        return self._D.shape[0]

    # ---- 設計変数 ----

    def _has_dv(self, arr: np.ndarray) -> bool:
        return self.t_num >= 0 and len(arr) >= 1

    def get_design_vars_per_node(self) -> int:
        return 1 if self.t_num >= 0 else 0

    def get_design_var_nums(self, elem_index: int, dv_nums: np.ndarray) -> int:
        if self._has_dv(dv_nums):
            dv_nums[0] = self.t_num
            return 1
        return 0

    def set_design_vars(self, elem_index: int, dvs: np.ndarray) -> int:
        if self._has_dv(dvs):
            self.t = float(dvs[0])
            return 1
        return 0

    def get_design_vars(self, elem_index: int, dvs: np.ndarray) -> int:
        if self._has_dv(dvs):
            dvs[0] = self.t
            return 1
        return 0

    def get_design_var_range(self, elem_index: int, lb: np.ndarray, ub: np.ndarray) -> int:
        if self._has_dv(lb) and len(ub) >= 1:
            lb[0] = self.t_lb
            ub[0] = self.t_ub
            return 1
        return 0

    def eval_design_field_value(
        self,
        elem_index: int,
        pt: np.ndarray,
        X: np.ndarray,
        index: int,
    ) -> float:
        if index == 0:
            return self.t
        return 0.0

    # ---- 質量・熱容量 ----

    def eval_density(self, elem_index: int, pt: np.ndarray, X: np.ndarray) -> float:
        return self.t * self.props.rho

    def add_density_dv_sens(
        self,
        elem_index: int,
        scale: float,
        pt: np.ndarray,
        X: np.ndarray,
        dfdx: np.ndarray,
    ) -> None:
        if self._has_dv(dfdx):
            dfdx[0] += scale * self.props.rho

    def eval_specific_heat(self, elem_index: int, pt: np.ndarray, X: np.ndarray) -> float:
        return self.props.specific_heat

    def add_specific_heat_dv_sens(
        self,
        elem_index: int,
        scale: float,
        pt: np.ndarray,
        X: np.ndarray,
        dfdx: np.ndarray,
    ) -> None:
        # 比熱は設計変数に依存しない
        return None

    # ---- 応力 ----

    def eval_stress(
        self,
        elem_index: int,
        pt: np.ndarray,
        X: np.ndarray,
        e: np.ndarray,
    ) -> np.ndarray:
        return self.t * (self._D @ e)

    def eval_tangent_stiffness(
        self,
        elem_index: int,
        pt: np.ndarray,
        X: np.ndarray,
    ) -> np.ndarray:
        return self.t * self._D

    def add_stress_dv_sens(
        self,
        elem_index: int,
        scale: float,
        pt: np.ndarray,
        X: np.ndarray,
        e: np.ndarray,
        psi: np.ndarray,
        dfdx: np.ndarray,
    ) -> None:
        if self._has_dv(dfdx):
            dfdx[0] += scale * float(psi @ (self._D @ e))

    def eval_thermal_strain(
        self,
        elem_index: int,
        pt: np.ndarray,
        X: np.ndarray,
        theta: float,
    ) -> np.ndarray:
        return (self.props.alpha * theta) * self._thermal_dir

    # ---- 熱流束 ----

    def eval_heat_flux(
        self,
        elem_index: int,
        pt: np.ndarray,
        X: np.ndarray,
        grad: np.ndarray,
    ) -> np.ndarray:
        return (self.t * self.props.kappa) * np.asarray(grad, dtype=float)

    def eval_tangent_heat_flux(
        self,
        elem_index: int,
        pt: np.ndarray,
        X: np.ndarray,
    ) -> np.ndarray:
        return (self.t * self.props.kappa) * np.eye(self._dim)

    def add_heat_flux_dv_sens(
        self,
        elem_index: int,
        scale: float,
        pt: np.ndarray,
        X: np.ndarray,
        grad: np.ndarray,
        psi: np.ndarray,
        dfdx: np.ndarray,
    ) -> None:
        if self._has_dv(dfdx):
            dfdx[0] += scale * self.props.kappa * float(psi @ grad)

    # ---- 破損 ----

    def _von_mises(self, s: np.ndarray) -> float:
        raise NotImplementedError

    def _von_mises_sens(self, s: np.ndarray) -> tuple[float, np.ndarray]:
        raise NotImplementedError

    def eval_failure(
        self,
        elem_index: int,
        pt: np.ndarray,
        X: np.ndarray,
        e: np.ndarray,
    ) -> float:
        return self._von_mises(self._D @ e) / self.props.ys

    def eval_failure_strain_sens(
        self,
        elem_index: int,
        pt: np.ndarray,
        X: np.ndarray,
        e: np.ndarray,
    ) -> FailureStrainSens:
        vm, dvm = self._von_mises_sens(self._D @ e)
        ys = self.props.ys
        return FailureStrainSens(fail=vm / ys, dfde=self._D.T @ dvm / ys)

    def add_failure_dv_sens(
        self,
        elem_index: int,
        scale: float,
        pt: np.ndarray,
        X: np.ndarray,
        e: np.ndarray,
        dfdx: np.ndarray,
    ) -> None:
        # 破損指標は t でスケールしない
        return None


class PlaneStressConstitutive(_IsotropicThermoelastic):
    """平面応力の等方熱弾性構成則.

    Args:
        props: 材料物性
        t: 板厚（設計変数）
        t_num: 設計変数のグローバル番号（-1 で設計変数なし）
        t_lb, t_ub: 設計変数の下限・上限
    """

    def __init__(
        self,
        props: MaterialProperties,
        t: float = 1.0,
        t_num: int = -1,
        t_lb: float = 0.0,
        t_ub: float = 1e20,
    ) -> None:
        super().__init__(
            props,
            constitutive_plane_stress(props.E, props.nu),
            np.array([1.0, 1.0, 0.0]),
            2,
            t,
            t_num,
            t_lb,
            t_ub,
        )

    def _von_mises(self, s: np.ndarray) -> float:
        return von_mises_2d(s)

    def _von_mises_sens(self, s: np.ndarray) -> tuple[float, np.ndarray]:
        return von_mises_2d_sens(s)


class SolidConstitutive(_IsotropicThermoelastic):
    """3D 固体の等方熱弾性構成則.

    Args:
        props: 材料物性
        t: 体積分率（設計変数）
        t_num: 設計変数のグローバル番号（-1 で設計変数なし）
        t_lb, t_ub: 設計変数の下限・上限
    """

    def __init__(
        self,
        props: MaterialProperties,
        t: float = 1.0,
        t_num: int = -1,
        t_lb: float = 0.0,
        t_ub: float = 1e20,
    ) -> None:
        super().__init__(
            props,
            constitutive_3d(props.E, props.nu),
            np.array([1.0, 1.0, 1.0, 0.0, 0.0, 0.0]),
            3,
            t,
            t_num,
            t_lb,
            t_ub,
        )

    def _von_mises(self, s: np.ndarray) -> float:
        return von_mises_3d(s)

    def _von_mises_sens(self, s: np.ndarray) -> tuple[float, np.ndarray]:
        return von_mises_3d_sens(s)
