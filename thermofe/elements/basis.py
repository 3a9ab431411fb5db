"""Lagrange 基底: Q4（4節点四角形）と HEX8（8節点六面体）.

BasisProtocol 適合。形状関数・ガウス積分点・面積分点と、
要素モデルとの橋渡し（状態の補間、弱形式係数の節点への分配）を提供する。

== 節点順序（自然座標）==

Q4:
  0: (-1,-1)  1: (+1,-1)  2: (+1,+1)  3: (-1,+1)

HEX8:
  0: (-1,-1,-1)  1: (+1,-1,-1)  2: (+1,+1,-1)  3: (-1,+1,-1)
  4: (-1,-1,+1)  5: (+1,-1,+1)  6: (+1,+1,+1)  7: (-1,+1,+1)

== HEX8 の面 ==

  0: ξ=-1  1: ξ=+1  2: η=-1  3: η=+1  4: ζ=-1  5: ζ=+1

各面のパラメータ接線 (t1, t2) は t1 × t2 が外向き法線になる順に並べる。

== 幾何量 ==

  Xd[i, j] = ∂X_i/∂ξ_j,   J = Xd⁻¹
  Ux[k, j] = Σ_n U[n, k] ∂N_n/∂ξ_m J[m, j]
"""

from __future__ import annotations

import numpy as np

from thermofe.core.results import FaceNormal, FieldGradient

# ============================================================
# ガウス積分点
# ============================================================

_G2 = 1.0 / np.sqrt(3.0)
_GAUSS_1D = (-_G2, +_G2)

_GAUSS_2x2 = np.array([(xi, eta) for eta in _GAUSS_1D for xi in _GAUSS_1D])
_GAUSS_2x2x2 = np.array(
    [(xi, eta, zeta) for zeta in _GAUSS_1D for eta in _GAUSS_1D for xi in _GAUSS_1D]
)


# ============================================================
# 形状関数
# ============================================================


def _quad4_shape(xi: float, eta: float) -> np.ndarray:
    """Q4 形状関数 N (4,)."""
    return 0.25 * np.array(
        [
            (1 - xi) * (1 - eta),
            (1 + xi) * (1 - eta),
            (1 + xi) * (1 + eta),
            (1 - xi) * (1 + eta),
        ]
    )


def _quad4_dNdxi(xi: float, eta: float) -> np.ndarray:
    """Q4 形状関数の自然座標微分.

    Returns:
        dNdxi: (2, 4): [dN/dξ; dN/dη]
    """
    return 0.25 * np.array(
        [
            [-(1 - eta), (1 - eta), (1 + eta), -(1 + eta)],
            [-(1 - xi), -(1 + xi), (1 + xi), (1 - xi)],
        ]
    )


def _hex8_shape(xi: float, eta: float, zeta: float) -> np.ndarray:
    """HEX8 形状関数 N_i (i=0..7)."""
    xm, xp = 1.0 - xi, 1.0 + xi
    em, ep = 1.0 - eta, 1.0 + eta
    zm, zp = 1.0 - zeta, 1.0 + zeta
    return 0.125 * np.array(
        [
            xm * em * zm,
            xp * em * zm,
            xp * ep * zm,
            xm * ep * zm,
            xm * em * zp,
            xp * em * zp,
            xp * ep * zp,
            xm * ep * zp,
        ]
    )


def _hex8_dNdxi(xi: float, eta: float, zeta: float) -> np.ndarray:
    """HEX8 形状関数の自然座標微分.

    Returns:
        dNdxi: (3, 8): [dN/dξ; dN/dη; dN/dζ]
    """
    xm, xp = 1.0 - xi, 1.0 + xi
    em, ep = 1.0 - eta, 1.0 + eta
    zm, zp = 1.0 - zeta, 1.0 + zeta
    return 0.125 * np.array(
        [
            [-em * zm, +em * zm, +ep * zm, -ep * zm, -em * zp, +em * zp, +ep * zp, -ep * zp],
            [-xm * zm, -xp * zm, +xp * zm, +xm * zm, -xm * zp, -xp * zp, +xp * zp, +xm * zp],
            [-xm * em, -xp * em, -xp * ep, -xm * ep, +xm * em, +xp * em, +xp * ep, +xm * ep],
        ]
    )


# ============================================================
# 共通実装
# ============================================================


class _LagrangeBasis:
    """体積積分・補間・弱形式係数の分配（Q4/HEX8 共通）."""

    num_nodes: int = 0
    num_params: int = 0
    _quad_pts: np.ndarray
    _quad_wts: np.ndarray

    def _shape(self, pt: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        raise NotImplementedError

    def get_num_quadrature_points(self) -> int:
        return len(self._quad_wts)

    def get_quadrature_point(self, n: int) -> tuple[float, np.ndarray]:
        return float(self._quad_wts[n]), self._quad_pts[n].copy()

    def get_num_face_quadrature_points(self, face: int) -> int:
        return 0

    def get_face_quadrature_point(self, face: int, n: int) -> tuple[float, np.ndarray, np.ndarray]:
        raise IndexError(f"{type(self).__name__} は面積分点を持たない")

    def eval_basis(self, pt: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        """形状関数とその自然座標微分.

        Returns:
            N: (nnodes,)
            dNdxi: (nnodes, num_params)
        """
        N, dNdxi = self._shape(pt)
        return N, dNdxi.T

    def interp_fields(self, pt: np.ndarray, vars_per_node: int, values: np.ndarray) -> np.ndarray:
        """節点値を積分点に補間する. (vars_per_node,) を返す."""
        N, _ = self.eval_basis(pt)
        return N @ np.asarray(values, dtype=float).reshape(self.num_nodes, vars_per_node)

    def get_field_gradient(
        self,
        pt: np.ndarray,
        Xpts: np.ndarray,
        vars_per_node: int,
        vars: np.ndarray,
        dvars: np.ndarray,
        ddvars: np.ndarray,
    ) -> FieldGradient:
        """積分点の幾何量と状態（値・時間微分・物理勾配）を計算する."""
        nn = self.num_nodes
        N, dNdxi = self.eval_basis(pt)
        Xpts = np.asarray(Xpts, dtype=float).reshape(nn, self.num_params)

        X = N @ Xpts
        Xd = Xpts.T @ dNdxi
        detXd = float(np.linalg.det(Xd))
        J = np.linalg.inv(Xd)

        U = np.asarray(vars, dtype=float).reshape(nn, vars_per_node)
        Ud = np.asarray(dvars, dtype=float).reshape(nn, vars_per_node)
        Udd = np.asarray(ddvars, dtype=float).reshape(nn, vars_per_node)
        Ut = np.column_stack([N @ U, N @ Ud, N @ Udd]).ravel()
        Ux = ((U.T @ dNdxi) @ J).ravel()

        return FieldGradient(detXd=detXd, X=X, Xd=Xd, J=J, Ut=Ut, Ux=Ux)

    def get_face_normal(self, pt: np.ndarray, tangent: np.ndarray, Xpts: np.ndarray) -> FaceNormal:
        """面積分点の面積要素と外向き単位法線.

        Args:
            pt: 面上の積分点（自然座標）
            tangent: (2, num_params) パラメータ空間の面接線
            Xpts: (nnodes, 3) 節点座標
        """
        N, dNdxi = self.eval_basis(pt)
        Xpts = np.asarray(Xpts, dtype=float).reshape(self.num_nodes, self.num_params)
        X = N @ Xpts
        Xd = Xpts.T @ dNdxi
        a = np.cross(Xd @ tangent[0], Xd @ tangent[1])
        area = float(np.linalg.norm(a))
        return FaceNormal(area=area, X=X, Xd=Xd, normal=a / area)

    def add_weak_residual(
        self,
        pt: np.ndarray,
        weight: float,
        J: np.ndarray,
        vars_per_node: int,
        DUt: np.ndarray,
        DUx: np.ndarray | None,
        res: np.ndarray,
    ) -> None:
        """弱形式係数を節点残差に分配して res に加算する.

        res[n, k] += w (N_n Σ_s DUt[3k+s] + ∂N_n/∂x_j DUx[dim*k+j])
        """
        N, dNdxi = self.eval_basis(pt)
        R = res.reshape(self.num_nodes, vars_per_node)
        R += weight * np.outer(N, np.asarray(DUt).reshape(vars_per_node, 3).sum(axis=1))
        if DUx is not None:
            dNdx = dNdxi @ J
            R += weight * (dNdx @ np.asarray(DUx).reshape(vars_per_node, self.num_params).T)


# ============================================================
# BasisProtocol 適合クラス
# ============================================================


class Quad4Basis(_LagrangeBasis):
    """4節点双線形四角形基底（2×2 ガウス積分）."""

    num_nodes = 4
    num_params = 2

    def __init__(self) -> None:
        self._quad_pts = _GAUSS_2x2
        self._quad_wts = np.ones(4)

    def _shape(self, pt: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        return _quad4_shape(pt[0], pt[1]), _quad4_dNdxi(pt[0], pt[1])


# 面ごとの (固定軸, 固定値, t1 軸, t2 軸)
_HEX8_FACES = (
    (0, -1.0, 2, 1),
    (0, +1.0, 1, 2),
    (1, -1.0, 0, 2),
    (1, +1.0, 2, 0),
    (2, -1.0, 1, 0),
    (2, +1.0, 0, 1),
)


class Hex8Basis(_LagrangeBasis):
    """8節点三重線形六面体基底（2×2×2 ガウス積分、各面 2×2）."""

    num_nodes = 8
    num_params = 3

    FACE_NODES = (
        (0, 3, 7, 4),
        (1, 2, 6, 5),
        (0, 1, 5, 4),
        (3, 2, 6, 7),
        (0, 1, 2, 3),
        (4, 5, 6, 7),
    )

    def __init__(self) -> None:
        self._quad_pts = _GAUSS_2x2x2
        self._quad_wts = np.ones(8)

    def _shape(self, pt: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        return _hex8_shape(pt[0], pt[1], pt[2]), _hex8_dNdxi(pt[0], pt[1], pt[2])

    def get_num_face_quadrature_points(self, face: int) -> int:
        return 4

    def get_face_quadrature_point(self, face: int, n: int) -> tuple[float, np.ndarray, np.ndarray]:
        axis, value, a1, a2 = _HEX8_FACES[face]
        pt = np.zeros(3)
        pt[axis] = value
        pt[a1] = _GAUSS_1D[n % 2]
        pt[a2] = _GAUSS_1D[n // 2]
        tangent = np.zeros((2, 3))
        tangent[0, a1] = 1.0
        tangent[1, a2] = 1.0
        return 1.0, pt, tangent
