"""熱弾性構成則（材料モデル）の抽象インタフェース定義.

Protocol 定義:
  ThermoelasticConstitutiveProtocol: 応力・熱流束・熱ひずみ・密度・比熱と
                                      その設計変数感度、設計変数の入出力。

設計変数は構成則オブジェクトが所有する。要素モデルは呼び出しを転送するだけで
自身では保持しない。配列引数はすべて呼び出し側所有で、
``add_*_dv_sens`` 系は ``dfdx`` に加算する（上書きしない）。

Voigt 表記:
  平面応力: e = [exx, eyy, gxy]
  3D:       e = [exx, eyy, ezz, gyz, gxz, gxy]
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import numpy as np

from thermofe.core.results import FailureStrainSens


@runtime_checkable
class ThermoelasticConstitutiveProtocol(Protocol):
    """熱弾性構成則の共通インタフェース.

    適合クラス例:
      - PlaneStressConstitutive  (nstress=3)
      - SolidConstitutive        (nstress=6)
    """

    def get_num_stresses(self) -> int:
        """Voigt 成分数."""
        ...

    # ---- 設計変数 ----

    def get_design_vars_per_node(self) -> int: ...

    def get_design_var_nums(self, elem_index: int, dv_nums: np.ndarray) -> int:
        """要素の設計変数番号を dv_nums に書き込み、その数を返す.

        dv_nums が短い場合は何も書かず 0 を返す。
        """
        ...

    def set_design_vars(self, elem_index: int, dvs: np.ndarray) -> int: ...

    def get_design_vars(self, elem_index: int, dvs: np.ndarray) -> int: ...

    def get_design_var_range(self, elem_index: int, lb: np.ndarray, ub: np.ndarray) -> int: ...

    # ---- 質量・熱容量 ----

    def eval_density(self, elem_index: int, pt: np.ndarray, X: np.ndarray) -> float: ...

    def add_density_dv_sens(
        self,
        elem_index: int,
        scale: float,
        pt: np.ndarray,
        X: np.ndarray,
        dfdx: np.ndarray,
    ) -> None: ...

    def eval_specific_heat(self, elem_index: int, pt: np.ndarray, X: np.ndarray) -> float: ...

    def add_specific_heat_dv_sens(
        self,
        elem_index: int,
        scale: float,
        pt: np.ndarray,
        X: np.ndarray,
        dfdx: np.ndarray,
    ) -> None: ...

    # ---- 応力 ----

    def eval_stress(
        self,
        elem_index: int,
        pt: np.ndarray,
        X: np.ndarray,
        e: np.ndarray,
    ) -> np.ndarray:
        """機械ひずみ e から応力を返す."""
        ...

    def eval_tangent_stiffness(
        self,
        elem_index: int,
        pt: np.ndarray,
        X: np.ndarray,
    ) -> np.ndarray:
        """接線剛性 C = ∂s/∂e (nstress, nstress) を返す."""
        ...

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
        """dfdx += scale * d(psi · s(e)) / dx."""
        ...

    def eval_thermal_strain(
        self,
        elem_index: int,
        pt: np.ndarray,
        X: np.ndarray,
        theta: float,
    ) -> np.ndarray:
        """温度変化 theta に対する熱ひずみ（theta について線形）."""
        ...

    # ---- 熱流束 ----

    def eval_heat_flux(
        self,
        elem_index: int,
        pt: np.ndarray,
        X: np.ndarray,
        grad: np.ndarray,
    ) -> np.ndarray: ...

    def eval_tangent_heat_flux(
        self,
        elem_index: int,
        pt: np.ndarray,
        X: np.ndarray,
    ) -> np.ndarray:
        """伝導テンソル (dim, dim)."""
        ...

    def add_heat_flux_dv_sens(
        self,
        elem_index: int,
        scale: float,
        pt: np.ndarray,
        X: np.ndarray,
        grad: np.ndarray,
        psi: np.ndarray,
        dfdx: np.ndarray,
    ) -> None: ...

    # ---- 破損 ----

    def eval_failure(
        self,
        elem_index: int,
        pt: np.ndarray,
        X: np.ndarray,
        e: np.ndarray,
    ) -> float: ...

    def eval_failure_strain_sens(
        self,
        elem_index: int,
        pt: np.ndarray,
        X: np.ndarray,
        e: np.ndarray,
    ) -> FailureStrainSens: ...

    def add_failure_dv_sens(
        self,
        elem_index: int,
        scale: float,
        pt: np.ndarray,
        X: np.ndarray,
        e: np.ndarray,
        dfdx: np.ndarray,
    ) -> None: ...

    def eval_design_field_value(
        self,
        elem_index: int,
        pt: np.ndarray,
        X: np.ndarray,
        index: int,
    ) -> float: ...
