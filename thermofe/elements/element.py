"""要素モデル + 基底による汎用要素（ElementProtocol 適合）.

積分点ループを回し、基底で状態を補間して要素モデルを呼び、
弱形式係数・ヤコビアン値を節点自由度へ分配する。

== ヤコビアンの分配 ==

非ゼロ (行 ix, 列 jy) ごとに
  行: ix < 3vpn → 成分 ix//3, 試験関数 N
      それ以外  → 成分 (ix-3vpn)//dim, 試験関数 ∂N/∂x_j
  列: jy < 3vpn → 成分 jy//3, 形状関数 N, 係数 (α, β, γ)[jy%3]
      それ以外  → 成分 (jy-3vpn)//dim, 形状関数 ∂N/∂x_j, 係数 α

== 節点座標感度 ==

  f = Σ_q w detXd · p(Ux, Psix),  Ux = Uξ J,  J = Xd⁻¹
  ∂f/∂Xd = w [p detXd Jᵀ + detXd (∂p/∂Xd - Uxᵀ ∂p/∂Ux Jᵀ - Psixᵀ DUx Jᵀ)]
  ∂f/∂Xpts[n, i] = Σ_j ∂f/∂Xd_ij ∂N_n/∂ξ_j + w detXd N_n ∂p/∂X_i
"""

from __future__ import annotations

import numpy as np

from thermofe.core.constants import JACOBIAN_MATRIX
from thermofe.core.element import BasisProtocol, ElementModelProtocol


class WeakFormElement:
    """要素モデルを基底で積分する要素.

    要素ベクトルは vars[node*vpn + k]、要素行列は同じ並びの (ndof, ndof)。
    res, mat, dfdx, fXptSens は呼び出し側所有で、いずれも加算のみ行う。

    Args:
        model: 積分点の物理モデル
        basis: 形状関数・積分則
    """

    def __init__(self, model: ElementModelProtocol, basis: BasisProtocol) -> None:
        if model.get_num_parameters() != basis.num_params:
            raise ValueError(
                f"モデルのパラメータ次元 {model.get_num_parameters()} と"
                f"基底の次元 {basis.num_params} が不一致"
            )
        self.model = model
        self.basis = basis

    def get_vars_per_node(self) -> int:
        return self.model.get_vars_per_node()

    def get_num_nodes(self) -> int:
        return self.basis.num_nodes

    def get_design_vars_per_node(self) -> int:
        return self.model.get_design_vars_per_node()

    def get_design_var_nums(self, elem_index: int, dv_nums: np.ndarray) -> int:
        return self.model.get_design_var_nums(elem_index, dv_nums)

    def set_design_vars(self, elem_index: int, dvs: np.ndarray) -> int:
        return self.model.set_design_vars(elem_index, dvs)

    def get_design_vars(self, elem_index: int, dvs: np.ndarray) -> int:
        return self.model.get_design_vars(elem_index, dvs)

    def get_design_var_range(self, elem_index: int, lb: np.ndarray, ub: np.ndarray) -> int:
        return self.model.get_design_var_range(elem_index, lb, ub)

    # ---- 内部ヘルパー ----

    def _adjoint_fields(
        self,
        pt: np.ndarray,
        J: np.ndarray,
        psi: np.ndarray,
    ) -> tuple[np.ndarray, np.ndarray]:
        """随伴変数を補間. Psi は3つの時間スロットすべてに同じ値を入れる."""
        vpn = self.get_vars_per_node()
        N, dNdxi = self.basis.eval_basis(pt)
        P = np.asarray(psi, dtype=float).reshape(self.basis.num_nodes, vpn)
        Psi = np.repeat(N @ P, 3)
        Psix = ((P.T @ dNdxi) @ J).ravel()
        return Psi, Psix

    def _add_weak_matrix(
        self,
        pt: np.ndarray,
        J: np.ndarray,
        weight: float,
        pairs: np.ndarray,
        Jac: np.ndarray,
        coef: tuple[float, float, float],
        mat: np.ndarray,
    ) -> None:
        nn = self.basis.num_nodes
        dim = self.basis.num_params
        vpn = self.get_vars_per_node()
        nut = 3 * vpn

        N, dNdxi = self.basis.eval_basis(pt)
        dNdx = dNdxi @ J
        M = mat.reshape(nn, vpn, nn, vpn)
        for p in range(len(Jac)):
            ix = int(pairs[2 * p])
            jy = int(pairs[2 * p + 1])
            if ix < nut:
                r, phi_r = ix // 3, N
            else:
                r, j = divmod(ix - nut, dim)
                phi_r = dNdx[:, j]
            if jy < nut:
                c, slot = divmod(jy, 3)
                phi_c, cf = N, coef[slot]
            else:
                c, j = divmod(jy - nut, dim)
                phi_c, cf = dNdx[:, j], coef[0]
            M[:, r, :, c] += (weight * cf * Jac[p]) * np.outer(phi_r, phi_c)

    # ---- 残差・ヤコビアン ----

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
        """res に要素残差を加算."""
        basis = self.basis
        vpn = self.get_vars_per_node()
        for n in range(basis.get_num_quadrature_points()):
            weight, pt = basis.get_quadrature_point(n)
            fg = basis.get_field_gradient(pt, Xpts, vpn, vars, dvars, ddvars)
            DUt, DUx = self.model.eval_weak_integrand(
                elem_index, time, n, pt, fg.X, fg.Xd, fg.Ut, fg.Ux
            )
            basis.add_weak_residual(pt, weight * fg.detXd, fg.J, vpn, DUt, DUx, res)

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
        """res に残差、mat に α∂R/∂u + β∂R/∂u̇ + γ∂R/∂ü を加算."""
        basis = self.basis
        vpn = self.get_vars_per_node()
        _, pairs = self.model.get_weak_matrix_nonzeros(JACOBIAN_MATRIX, elem_index)
        for n in range(basis.get_num_quadrature_points()):
            weight, pt = basis.get_quadrature_point(n)
            fg = basis.get_field_gradient(pt, Xpts, vpn, vars, dvars, ddvars)
            DUt, DUx, Jac = self.model.eval_weak_matrix(
                JACOBIAN_MATRIX, elem_index, time, n, pt, fg.X, fg.Xd, fg.Ut, fg.Ux
            )
            w = weight * fg.detXd
            basis.add_weak_residual(pt, w, fg.J, vpn, DUt, DUx, res)
            self._add_weak_matrix(pt, fg.J, w, pairs, Jac, (alpha, beta, gamma), mat)

    def add_matrix(
        self,
        mat_type: int,
        elem_index: int,
        time: float,
        scale: float,
        Xpts: np.ndarray,
        vars: np.ndarray,
        mat: np.ndarray,
    ) -> None:
        """mat に scale × (mat_type の要素行列) を加算. 未対応の mat_type では何もしない."""
        basis = self.basis
        vpn = self.get_vars_per_node()
        zeros = np.zeros_like(np.asarray(vars, dtype=float))
        nnz, pairs = self.model.get_weak_matrix_nonzeros(mat_type, elem_index)
        if nnz == 0:
            return
        for n in range(basis.get_num_quadrature_points()):
            weight, pt = basis.get_quadrature_point(n)
            fg = basis.get_field_gradient(pt, Xpts, vpn, vars, zeros, zeros)
            _, _, Jac = self.model.eval_weak_matrix(
                mat_type, elem_index, time, n, pt, fg.X, fg.Xd, fg.Ut, fg.Ux
            )
            w = scale * weight * fg.detXd
            self._add_weak_matrix(pt, fg.J, w, pairs, Jac, (1.0, 1.0, 1.0), mat)

    # ---- 随伴積 ----

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
        """dfdx += scale * d(psiᵀ R)/dx."""
        basis = self.basis
        vpn = self.get_vars_per_node()
        for n in range(basis.get_num_quadrature_points()):
            weight, pt = basis.get_quadrature_point(n)
            fg = basis.get_field_gradient(pt, Xpts, vpn, vars, dvars, ddvars)
            Psi, Psix = self._adjoint_fields(pt, fg.J, psi)
            self.model.add_weak_adj_product(
                elem_index,
                time,
                scale * weight * fg.detXd,
                n,
                pt,
                fg.X,
                fg.Xd,
                fg.Ut,
                fg.Ux,
                Psi,
                Psix,
                dfdx,
            )

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
        nn = basis.num_nodes
        dim = basis.num_params
        vpn = self.get_vars_per_node()
        F = fXptSens.reshape(nn, dim)
        for n in range(basis.get_num_quadrature_points()):
            weight, pt = basis.get_quadrature_point(n)
            fg = basis.get_field_gradient(pt, Xpts, vpn, vars, dvars, ddvars)
            N, dNdxi = basis.eval_basis(pt)
            Psi, Psix = self._adjoint_fields(pt, fg.J, psi)
            r = self.model.eval_weak_adj_xpt_sens_product(
                elem_index, time, n, pt, fg.X, fg.Xd, fg.Ut, fg.Ux, Psi, Psix
            )

            w = scale * weight
            JT = fg.J.T
            Ux = fg.Ux.reshape(vpn, dim)
            dfdUx = r.dfdUx.reshape(vpn, dim)
            Psx = Psix.reshape(vpn, dim)
            DUx = r.dfdPsix.reshape(vpn, dim)
            dfdXd = w * (
                r.product * fg.detXd * JT
                + fg.detXd
                * (r.dfdXd.reshape(dim, dim) - Ux.T @ dfdUx @ JT - Psx.T @ DUx @ JT)
            )
            F += dNdxi @ dfdXd.T
            F += (w * fg.detXd) * np.outer(N, r.dfdX)
