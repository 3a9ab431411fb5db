"""要素・要素モデル・基底の抽象インタフェース定義.

Protocol 階層:
  ElementModelProtocol: 積分点での物理（弱形式係数・ヤコビアン・点量・感度）
  BasisProtocol: 形状関数・積分点・面積分点・補間
  ElementProtocol: 要素レベルの残差・ヤコビアン・随伴積

アセンブラとの境界（要素ベクトル/行列の並び）:
  vars[node * vpn + k]: 節点ごと、次に状態成分ごと
  mat[(i*vpn + k), (j*vpn + l)]: 行・列とも同じ並び

Protocol を採用する理由:
  - 構造的部分型（明示的な継承不要）
  - 荷重要素のように異質な実装も同じアセンブラで一様に扱える
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import numpy as np

from thermofe.core.results import (
    AdjXptSensProduct,
    FaceNormal,
    FieldGradient,
    PointQuantity,
    PointQuantitySens,
    WeakIntegrand,
    WeakMatrix,
    WeakMatrixNonzeros,
)


@runtime_checkable
class ElementModelProtocol(Protocol):
    """積分点での物理モデルのインタフェース.

    適合クラス例:
      - ThermoelasticityModel2D
      - ThermoelasticityModel3D
    """

    def get_num_parameters(self) -> int: ...

    def get_vars_per_node(self) -> int: ...

    def get_design_vars_per_node(self) -> int: ...

    def get_design_var_nums(self, elem_index: int, dv_nums: np.ndarray) -> int: ...

    def set_design_vars(self, elem_index: int, dvs: np.ndarray) -> int: ...

    def get_design_vars(self, elem_index: int, dvs: np.ndarray) -> int: ...

    def get_design_var_range(self, elem_index: int, lb: np.ndarray, ub: np.ndarray) -> int: ...

    def eval_weak_integrand(
        self,
        elem_index: int,
        time: float,
        n: int,
        pt: np.ndarray,
        X: np.ndarray,
        Xd: np.ndarray,
        Ut: np.ndarray,
        Ux: np.ndarray,
    ) -> WeakIntegrand:
        """弱形式係数 DUt, DUx を返す."""
        ...

    def get_weak_matrix_nonzeros(self, mat_type: int, elem_index: int) -> WeakMatrixNonzeros:
        """mat_type のヤコビアン非ゼロパターン（定数表）を返す."""
        ...

    def eval_weak_matrix(
        self,
        mat_type: int,
        elem_index: int,
        time: float,
        n: int,
        pt: np.ndarray,
        X: np.ndarray,
        Xd: np.ndarray,
        Ut: np.ndarray,
        Ux: np.ndarray,
    ) -> WeakMatrix:
        """DUt, DUx と非ゼロパターン順のヤコビアン値を返す.

        len(Jac) は get_weak_matrix_nonzeros の nnz と常に一致する。
        """
        ...

    def add_weak_adj_product(
        self,
        elem_index: int,
        time: float,
        scale: float,
        n: int,
        pt: np.ndarray,
        X: np.ndarray,
        Xd: np.ndarray,
        Ut: np.ndarray,
        Ux: np.ndarray,
        Psi: np.ndarray,
        Psix: np.ndarray,
        dfdx: np.ndarray,
    ) -> None:
        """dfdx += scale * d(Psi·DUt + Psix·DUx)/dx."""
        ...

    def eval_weak_adj_xpt_sens_product(
        self,
        elem_index: int,
        time: float,
        n: int,
        pt: np.ndarray,
        X: np.ndarray,
        Xd: np.ndarray,
        Ut: np.ndarray,
        Ux: np.ndarray,
        Psi: np.ndarray,
        Psix: np.ndarray,
    ) -> AdjXptSensProduct: ...

    def eval_point_quantity(
        self,
        elem_index: int,
        quantity_type: int,
        time: float,
        n: int,
        pt: np.ndarray,
        X: np.ndarray,
        Xd: np.ndarray,
        Ut: np.ndarray,
        Ux: np.ndarray,
    ) -> PointQuantity: ...

    def add_point_quantity_dv_sens(
        self,
        elem_index: int,
        quantity_type: int,
        time: float,
        scale: float,
        n: int,
        pt: np.ndarray,
        X: np.ndarray,
        Xd: np.ndarray,
        Ut: np.ndarray,
        Ux: np.ndarray,
        dfdq: np.ndarray,
        dfdx: np.ndarray,
    ) -> None: ...

    def eval_point_quantity_sens(
        self,
        elem_index: int,
        quantity_type: int,
        time: float,
        n: int,
        pt: np.ndarray,
        X: np.ndarray,
        Xd: np.ndarray,
        Ut: np.ndarray,
        Ux: np.ndarray,
        dfdq: np.ndarray,
    ) -> PointQuantitySens: ...

    def get_output_data(
        self,
        elem_index: int,
        time: float,
        etype: int,
        write_flag: int,
        pt: np.ndarray,
        X: np.ndarray,
        Ut: np.ndarray,
        Ux: np.ndarray,
    ) -> np.ndarray: ...


@runtime_checkable
class BasisProtocol(Protocol):
    """形状関数と積分則のインタフェース.

    Attributes:
        num_nodes: 節点数
        num_params: パラメータ空間次元
    """

    num_nodes: int
    num_params: int

    def get_num_quadrature_points(self) -> int: ...

    def get_quadrature_point(self, n: int) -> tuple[float, np.ndarray]:
        """(重み, 積分点座標) を返す."""
        ...

    def get_num_face_quadrature_points(self, face: int) -> int: ...

    def get_face_quadrature_point(self, face: int, n: int) -> tuple[float, np.ndarray, np.ndarray]:
        """(重み, 積分点座標, パラメータ空間接線 (2, num_params)) を返す."""
        ...

    def eval_basis(self, pt: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        """(N (nnodes,), dN/dξ (nnodes, num_params)) を返す."""
        ...

    def get_field_gradient(
        self,
        pt: np.ndarray,
        Xpts: np.ndarray,
        vars_per_node: int,
        vars: np.ndarray,
        dvars: np.ndarray,
        ddvars: np.ndarray,
    ) -> FieldGradient: ...

    def get_face_normal(
        self, pt: np.ndarray, tangent: np.ndarray, Xpts: np.ndarray
    ) -> FaceNormal: ...

    def add_weak_residual(
        self,
        pt: np.ndarray,
        weight: float,
        J: np.ndarray,
        vars_per_node: int,
        DUt: np.ndarray,
        DUx: np.ndarray | None,
        res: np.ndarray,
    ) -> None: ...


@runtime_checkable
class ElementProtocol(Protocol):
    """要素レベルのインタフェース（アセンブラが一様に呼び出す）.

    適合クラス例:
      - WeakFormElement（要素モデル + 基底）
      - TractionElement3D（面荷重）
    """

    def get_vars_per_node(self) -> int: ...

    def get_num_nodes(self) -> int: ...

    def get_design_vars_per_node(self) -> int: ...

    def get_design_var_nums(self, elem_index: int, dv_nums: np.ndarray) -> int: ...

    def add_residual(
        self,
        elem_index: int,
        time: float,
        Xpts: np.ndarray,
        vars: np.ndarray,
        dvars: np.ndarray,
        ddvars: np.ndarray,
        res: np.ndarray,
    ) -> None:
        """res に要素残差を加算する."""
        ...

    def add_jacobian(
        self,
        elem_index: int,
        time: float,
        alpha: float,
        beta: float,
        gamma: float,
        Xpts: np.ndarray,
        vars: np.ndarray,
        dvars: np.ndarray,
        ddvars: np.ndarray,
        res: np.ndarray,
        mat: np.ndarray,
    ) -> None:
        """res に残差、mat に α∂R/∂u + β∂R/∂u̇ + γ∂R/∂ü を加算する."""
        ...

    def add_adj_res_product(
        self,
        elem_index: int,
        time: float,
        scale: float,
        psi: np.ndarray,
        Xpts: np.ndarray,
        vars: np.ndarray,
        dvars: np.ndarray,
        ddvars: np.ndarray,
        dfdx: np.ndarray,
    ) -> None: ...

    def add_adj_res_xpt_product(
        self,
        elem_index: int,
        time: float,
        scale: float,
        psi: np.ndarray,
        Xpts: np.ndarray,
        vars: np.ndarray,
        dvars: np.ndarray,
        ddvars: np.ndarray,
        fXptSens: np.ndarray,
    ) -> None: ...
