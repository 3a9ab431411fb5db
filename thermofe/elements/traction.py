"""3D 要素の1面に作用する表面荷重（トラクション）要素.

荷重の与え方は構築時に選ぶ戦略オブジェクトで切り替える:
  ConstantTraction: 定数ベクトル、または法線に比例する定数表
  FunctionTraction: (要素, 面, 時刻, 位置, 法線) の任意関数

== 残差 ==

  R[i, k] = -∫_face N_i tr_k dA

荷重は状態に依存しないので Jacobian への寄与はない。

== 節点座標感度 ==

面積分点で a = t1 × t2（t1 = Σ Na_i X_i, t2 = Σ Nb_i X_i）, A = |a|, n = a / A,
f = -w A (P·tr),  P_k = Σ N_i psi[i, k] とすると

  ∂f/∂a = -w [(P·tr) n + (I - n nᵀ) ∂(P·tr)/∂n]
  ∂f/∂X_i += Na_i (t2 × ∂f/∂a) + Nb_i (∂f/∂a × t1) - w A N_i ∂(P·tr)/∂X
"""

from __future__ import annotations

from collections.abc import Callable

import numpy as np

from thermofe.core.element import BasisProtocol

# ============================================================
# 荷重戦略
# ============================================================


class ConstantTraction:
    """定数トラクション.

    Args:
        trac: normal_component=True なら (vars_per_node, 3) の表 T で、
            荷重は tr = T @ n（圧力 p は T[:3, :3] = -p I）。
            False なら (vars_per_node,) の荷重ベクトルそのもの。
        normal_component: 荷重を面法線に比例させる
    """

    def __init__(self, trac: np.ndarray, normal_component: bool = True) -> None:
        self.trac = np.array(trac, dtype=float)
        self.normal_component = bool(normal_component)

    def check_vars_per_node(self, vars_per_node: int) -> None:
        shape = (vars_per_node, 3) if self.normal_component else (vars_per_node,)
        if self.trac.shape != shape:
            raise ValueError(f"trac の形状は {shape} が必要: {self.trac.shape}")

    def eval(
        self,
        elem_index: int,
        face_index: int,
        time: float,
        X: np.ndarray,
        normal: np.ndarray,
    ) -> np.ndarray:
        if self.normal_component:
            return self.trac @ normal
        return self.trac.copy()

    def eval_sens(
        self,
        elem_index: int,
        face_index: int,
        time: float,
        X: np.ndarray,
        normal: np.ndarray,
        dfdtr: np.ndarray,
    ) -> tuple[np.ndarray, np.ndarray]:
        """dfdtr · ∂tr/∂X, dfdtr · ∂tr/∂n."""
        if self.normal_component:
            return np.zeros(3), self.trac.T @ dfdtr
        return np.zeros(3), np.zeros(3)


class FunctionTraction:
    """関数で与えるトラクション.

    Args:
        func: func(elem_index, face_index, time, X, normal) -> tr (vars_per_node,)
        sens: sens(elem_index, face_index, time, X, normal, dfdtr) -> (dfdX, dfdn)。
            None なら荷重は X, normal に依存しないものとして扱う。
    """

    def __init__(
        self,
        func: Callable[..., np.ndarray],
        sens: Callable[..., tuple[np.ndarray, np.ndarray]] | None = None,
    ) -> None:
        self.func = func
        self.sens = sens

    def check_vars_per_node(self, vars_per_node: int) -> None:
        return None

    def eval(
        self,
        elem_index: int,
        face_index: int,
        time: float,
        X: np.ndarray,
        normal: np.ndarray,
    ) -> np.ndarray:
        return np.asarray(self.func(elem_index, face_index, time, X, normal), dtype=float)

    def eval_sens(
        self,
        elem_index: int,
        face_index: int,
        time: float,
        X: np.ndarray,
        normal: np.ndarray,
        dfdtr: np.ndarray,
    ) -> tuple[np.ndarray, np.ndarray]:
        if self.sens is None:
            return np.zeros(3), np.zeros(3)
        dfdX, dfdn = self.sens(elem_index, face_index, time, X, normal, dfdtr)
        return np.asarray(dfdX, dtype=float), np.asarray(dfdn, dtype=float)


# ============================================================
# 要素
# ============================================================


class TractionElement3D:
    """3D 親要素の面 face_index に作用する分布荷重要素（ElementProtocol 適合）.

    Args:
        vars_per_node: 節点あたり自由度（親要素と同じ）
        face_index: 面番号 0..5
        basis: 面積分点を持つ 3D 基底
        traction: ConstantTraction または FunctionTraction
    """

    def __init__(
        self,
        vars_per_node: int,
        face_index: int,
        basis: BasisProtocol,
        traction: ConstantTraction | FunctionTraction,
    ) -> None:
        if vars_per_node < 1:
            raise ValueError(f"vars_per_node は正値: {vars_per_node}")
        if not (0 <= face_index < 6):
            raise ValueError(f"face_index は 0..5: {face_index}")
        if basis.num_params != 3:
            raise ValueError(f"3D 基底が必要: num_params={basis.num_params}")
        traction.check_vars_per_node(vars_per_node)
        self.vars_per_node = vars_per_node
        self.face_index = face_index
        self.basis = basis
        self.traction = traction

    def get_vars_per_node(self) -> int:
        return self.vars_per_node

    def get_num_nodes(self) -> int:
        return self.basis.num_nodes

    def get_design_vars_per_node(self) -> int:
        return 0

    def get_design_var_nums(self, elem_index: int, dv_nums: np.ndarray) -> int:
        return 0

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
        """res に -∫ N tr dA を加算."""
        basis = self.basis
        face = self.face_index
        R = res.reshape(basis.num_nodes, self.vars_per_node)
        for n in range(basis.get_num_face_quadrature_points(face)):
            weight, pt, tangent = basis.get_face_quadrature_point(face, n)
            fn = basis.get_face_normal(pt, tangent, Xpts)
            tr = self.traction.eval(elem_index, face, time, fn.X, fn.normal)
            N, _ = basis.eval_basis(pt)
            R -= (weight * fn.area) * np.outer(N, tr)

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
        """残差のみ加算. 状態に依存しないので mat は変更しない."""
        self.add_residual(elem_index, time, Xpts, vars, dvars, ddvars, res)

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
    ) -> None:
        # 設計変数に依存しない
        return None

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
    ) -> None:
        """fXptSens += scale * d(psiᵀ R)/dXpts."""
        basis = self.basis
        face = self.face_index
        nn = basis.num_nodes
        Xn = np.asarray(Xpts, dtype=float).reshape(nn, 3)
        P = np.asarray(psi, dtype=float).reshape(nn, self.vars_per_node)
        F = fXptSens.reshape(nn, 3)
        for n in range(basis.get_num_face_quadrature_points(face)):
            weight, pt, tangent = basis.get_face_quadrature_point(face, n)
            N, dNdxi = basis.eval_basis(pt)
            Na = dNdxi @ tangent[0]
            Nb = dNdxi @ tangent[1]
            t1 = Na @ Xn
            t2 = Nb @ Xn
            a = np.cross(t1, t2)
            A = float(np.linalg.norm(a))
            normal = a / A
            X = N @ Xn

            Pq = N @ P
            tr = self.traction.eval(elem_index, face, time, X, normal)
            dfdX, dfdn = self.traction.eval_sens(elem_index, face, time, X, normal, Pq)

            ws = -scale * weight
            g = ws * (float(Pq @ tr) * normal + dfdn - normal * float(normal @ dfdn))
            F += np.outer(Na, np.cross(t2, g))
            F += np.outer(Nb, np.cross(g, t1))
            F += (ws * A) * np.outer(N, dfdX)
