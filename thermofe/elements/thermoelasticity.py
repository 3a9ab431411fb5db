"""線形熱弾性の要素モデル: 2D 平面応力 / 3D 固体.

積分点での弱形式係数・その厳密ヤコビアン・点量・設計変数/座標感度を与える。
メッシュ走査・積分・アセンブリは行わない（基底とアセンブラの責務）。

== 状態の並び ==

  Ut[3k + s]    : 成分 k の値 (s=0)・1階時間微分 (s=1)・2階時間微分 (s=2)
  Ux[dim*k + j] : ∂u_k/∂x_j
  成分: 2D = (u, v, T), 3D = (u, v, w, T)

== 弱形式 ==

  R = ∫ φ_k Σ_s DUt[3k+s] + ∂φ_k/∂x_j DUx[dim*k+j] dV

  G_ab = ∂u_a/∂x_b
  e    = 線形:     sym(G)（せん断は工学ひずみ）
         非線形:   E = ½ (G + Gᵀ + GᵀG)
  e_m  = e - α T [1, .., 1, 0, ..]
  s    = C e_m
  DUx[dim*a + b] = Σ_k s_k ∂e_k/∂G_ab       （= P_ab）
  DUx[温度勾配]   = κ ∇T
  DUt[3k + 2]    = ρ ü_k     （STEADY_STATE_MECHANICAL で除外）
  DUt[3T + 1]    = ρ c Ṫ     （STEADY_STATE_THERMAL で除外）

熱→機械の一方向連成。熱方程式に機械項は入らない。

== ヤコビアン ==

非ゼロパターン（行, 列）は import 時に1度だけ生成する読み取り専用の表:
  1. 慣性 (DUt[3k+2], Ut[3k+2]) と熱容量 (DUt[3T+1], Ut[3T+1])
  2. 機械ブロック (DUx_mech, Ux_mech) 密     K = Bᵀ C B (+ δ_ac S_bd)
  3. 熱連成 (DUx_mech, Ut[3T])               -Bᵀ C ∂e_th/∂T
  4. 熱伝導 (DUx_T, Ux_T)                    κ I
  2D: 27 組（表長 54）、3D: 103 組（表長 206）。
  値の並びはこの表と一致し、表にない要素へは書き込まない。
"""

from __future__ import annotations

import numpy as np

from thermofe.core.constants import (
    ELEMENT_DENSITY,
    ELEMENT_DISPLACEMENT,
    FAILURE_INDEX,
    HEAT_FLUX,
    JACOBIAN_MATRIX,
    MASS_MATRIX,
    OUTPUT_DISPLACEMENTS,
    OUTPUT_EXTRAS,
    OUTPUT_NODES,
    OUTPUT_STRAINS,
    OUTPUT_STRESSES,
    PLANE_STRESS_ELEMENT,
    SOLID_ELEMENT,
    STEADY_STATE_MECHANICAL,
    STEADY_STATE_THERMAL,
    STIFFNESS_MATRIX,
    STRAIN_ENERGY_DENSITY,
    TEMPERATURE,
    StrainType,
)
from thermofe.core.constitutive import ThermoelasticConstitutiveProtocol
from thermofe.core.results import (
    AdjXptSensProduct,
    PointQuantity,
    PointQuantitySens,
    WeakIntegrand,
    WeakMatrix,
    WeakMatrixNonzeros,
)

# ============================================================
# Voigt 成分と (i, j) の対応
# ============================================================

_VOIGT_2D = ((0, 0), (1, 1), (0, 1))
_VOIGT_3D = ((0, 0), (1, 1), (2, 2), (1, 2), (0, 2), (0, 1))

_EMPTY = np.zeros(0)
_EMPTY_PAIRS = np.zeros(0, dtype=np.intc)
_EMPTY_PAIRS.flags.writeable = False


# ============================================================
# ひずみとその微分
# ============================================================


def _strain(
    G: np.ndarray,
    voigt: tuple[tuple[int, int], ...],
    nonlinear: bool,
) -> tuple[np.ndarray, np.ndarray]:
    """変位勾配からひずみと B = ∂e/∂G を計算.

    Args:
        G: (dim, dim) 変位勾配 G_ab = ∂u_a/∂x_b
        voigt: Voigt 成分の (i, j)
        nonlinear: Green-Lagrange ひずみを使う

    Returns:
        e: (nstress,) ひずみ
        B: (nstress, dim*dim) B[k, dim*a + b] = ∂e_k/∂G_ab
    """
    dim = G.shape[0]
    nstress = len(voigt)
    e = np.empty(nstress)
    B = np.zeros((nstress, dim, dim))
    for k, (i, j) in enumerate(voigt):
        if i == j:
            e[k] = G[i, i]
            B[k, i, i] = 1.0
            if nonlinear:
                e[k] += 0.5 * (G[:, i] @ G[:, i])
                B[k, :, i] += G[:, i]
        else:
            e[k] = G[i, j] + G[j, i]
            B[k, i, j] += 1.0
            B[k, j, i] += 1.0
            if nonlinear:
                e[k] += G[:, i] @ G[:, j]
                B[k, :, i] += G[:, j]
                B[k, :, j] += G[:, i]
    return e, B.reshape(nstress, dim * dim)


def _stress_tensor(s: np.ndarray, voigt: tuple[tuple[int, int], ...], dim: int) -> np.ndarray:
    """Voigt 応力から対称応力テンソル S を組み立てる."""
    S = np.zeros((dim, dim))
    for k, (i, j) in enumerate(voigt):
        S[i, j] = s[k]
        S[j, i] = s[k]
    return S


def _linear_jac_pairs(dim: int) -> np.ndarray:
    """熱弾性モデルのヤコビアン非ゼロパターン（平坦化した (行, 列) 表）."""
    vpn = dim + 1
    nut = 3 * vpn
    T = dim
    dd = dim * dim
    pairs: list[tuple[int, int]] = []
    for k in range(dim):
        pairs.append((3 * k + 2, 3 * k + 2))
    pairs.append((3 * T + 1, 3 * T + 1))
    for a in range(dd):
        for b in range(dd):
            pairs.append((nut + a, nut + b))
    for a in range(dd):
        pairs.append((nut + a, 3 * T))
    for i in range(dim):
        for j in range(dim):
            pairs.append((nut + dd + i, nut + dd + j))
    table = np.array(pairs, dtype=np.intc).ravel()
    table.flags.writeable = False
    return table


_LINEAR_JAC_PAIRS_2D = _linear_jac_pairs(2)
_LINEAR_JAC_PAIRS_3D = _linear_jac_pairs(3)


# ============================================================
# 共通実装
# ============================================================


class _ThermoelasticityModel:
    """2D/3D 熱弾性モデルの共通実装（ElementModelProtocol 適合）.

    構成則オブジェクトは参照するだけで所有しない（寿命は呼び出し側が保証）。
    呼び出し間で可変状態を持たない。

    Args:
        con: 熱弾性構成則
        strain_type: ひずみ尺度（StrainType または対応する整数）
        steady_state_flag: STEADY_STATE_MECHANICAL | STEADY_STATE_THERMAL の組合せ
    """

    _dim: int = 0
    _voigt: tuple[tuple[int, int], ...] = ()
    _jac_pairs: np.ndarray = _EMPTY_PAIRS
    _etype: int = 0

    def __init__(
        self,
        con: ThermoelasticConstitutiveProtocol,
        strain_type: StrainType | int = StrainType.LINEAR,
        steady_state_flag: int = 0,
    ) -> None:
        if steady_state_flag & ~(STEADY_STATE_MECHANICAL | STEADY_STATE_THERMAL):
            raise ValueError(f"未対応の steady_state_flag: {steady_state_flag}")
        if con.get_num_stresses() != len(self._voigt):
            raise ValueError(
                f"構成則の応力成分数 {con.get_num_stresses()} != {len(self._voigt)}"
            )
        self.con = con
        self.strain_type = StrainType(strain_type)
        self.steady_state_flag = int(steady_state_flag)

        d = self._dim
        # Jac 値スライスの境界: [慣性 | 機械 | 連成 | 伝導]
        self._o_mech = d + 1
        self._o_coup = self._o_mech + d**4
        self._o_cond = self._o_coup + d * d

    # ---- 定数 ----

    def get_num_parameters(self) -> int:
        return self._dim

    def get_vars_per_node(self) -> int:
        return self._dim + 1

    def get_design_vars_per_node(self) -> int:
        return self.con.get_design_vars_per_node()

    def get_constitutive(self) -> ThermoelasticConstitutiveProtocol:
        return self.con

    # ---- 設計変数（構成則へ転送）----

    def get_design_var_nums(self, elem_index: int, dv_nums: np.ndarray) -> int:
        return self.con.get_design_var_nums(elem_index, dv_nums)

    def set_design_vars(self, elem_index: int, dvs: np.ndarray) -> int:
        return self.con.set_design_vars(elem_index, dvs)

    def get_design_vars(self, elem_index: int, dvs: np.ndarray) -> int:
        return self.con.get_design_vars(elem_index, dvs)

    def get_design_var_range(self, elem_index: int, lb: np.ndarray, ub: np.ndarray) -> int:
        return self.con.get_design_var_range(elem_index, lb, ub)

    # ---- 内部ヘルパー ----

    def _mechanics(
        self,
        elem_index: int,
        pt: np.ndarray,
        X: np.ndarray,
        Ut: np.ndarray,
        Ux: np.ndarray,
    ) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
        """(全ひずみ e, 機械ひずみ e_m, B, 応力 s)."""
        d = self._dim
        G = np.asarray(Ux[: d * d], dtype=float).reshape(d, d)
        e, B = _strain(G, self._voigt, self.strain_type is StrainType.NONLINEAR)
        em = e - self.con.eval_thermal_strain(elem_index, pt, X, Ut[3 * d])
        s = self.con.eval_stress(elem_index, pt, X, em)
        return e, em, B, s

    def _mech_tangent(
        self,
        elem_index: int,
        pt: np.ndarray,
        X: np.ndarray,
        B: np.ndarray,
        s: np.ndarray,
    ) -> tuple[np.ndarray, np.ndarray]:
        """(機械ブロック ∂DUx_mech/∂Ux_mech, C)."""
        C = self.con.eval_tangent_stiffness(elem_index, pt, X)
        K = B.T @ C @ B
        if self.strain_type is StrainType.NONLINEAR:
            d = self._dim
            K += np.kron(np.eye(d), _stress_tensor(s, self._voigt, d))
        return K, C

    def _coefficients(
        self,
        elem_index: int,
        pt: np.ndarray,
        X: np.ndarray,
        Ut: np.ndarray,
        Ux: np.ndarray,
    ) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray, float, float]:
        """(DUt, DUx, B, s, ρ, c)."""
        d = self._dim
        dd = d * d
        DUt = np.zeros(3 * (d + 1))
        DUx = np.zeros(d * (d + 1))

        rho = self.con.eval_density(elem_index, pt, X)
        c = self.con.eval_specific_heat(elem_index, pt, X)
        if not (self.steady_state_flag & STEADY_STATE_MECHANICAL):
            DUt[2 : 3 * d : 3] = rho * np.asarray(Ut[2 : 3 * d : 3])
        if not (self.steady_state_flag & STEADY_STATE_THERMAL):
            DUt[3 * d + 1] = rho * c * Ut[3 * d + 1]

        _, _, B, s = self._mechanics(elem_index, pt, X, Ut, Ux)
        DUx[:dd] = B.T @ s
        DUx[dd:] = self.con.eval_heat_flux(elem_index, pt, X, np.asarray(Ux[dd:], dtype=float))
        return DUt, DUx, B, s, rho, c

    # ---- 弱形式 ----

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
        """弱形式係数 DUt, DUx を計算."""
        DUt, DUx, _, _, _, _ = self._coefficients(elem_index, pt, X, Ut, Ux)
        return WeakIntegrand(DUt=DUt, DUx=DUx)

    def get_weak_matrix_nonzeros(self, mat_type: int, elem_index: int) -> WeakMatrixNonzeros:
        """ヤコビアン・剛性・質量行列は共通の定数パターン、それ以外は空."""
        if mat_type in (JACOBIAN_MATRIX, STIFFNESS_MATRIX, MASS_MATRIX):
            return WeakMatrixNonzeros(nnz=len(self._jac_pairs) // 2, pairs=self._jac_pairs)
        return WeakMatrixNonzeros(nnz=0, pairs=_EMPTY_PAIRS)

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
        """DUt, DUx と非ゼロパターン順のヤコビアン値.

        JACOBIAN_MATRIX: 全項
        STIFFNESS_MATRIX: 慣性・熱容量項を 0
        MASS_MATRIX: 慣性・熱容量項のみ
        その他: DUt, DUx とも 0、Jac は空
        """
        d = self._dim
        if mat_type not in (JACOBIAN_MATRIX, STIFFNESS_MATRIX, MASS_MATRIX):
            return WeakMatrix(DUt=np.zeros(3 * (d + 1)), DUx=np.zeros(d * (d + 1)), Jac=_EMPTY)

        DUt, DUx, B, s, rho, c = self._coefficients(elem_index, pt, X, Ut, Ux)
        Jac = np.zeros(len(self._jac_pairs) // 2)

        if mat_type != STIFFNESS_MATRIX:
            if not (self.steady_state_flag & STEADY_STATE_MECHANICAL):
                Jac[:d] = rho
            if not (self.steady_state_flag & STEADY_STATE_THERMAL):
                Jac[d] = rho * c

        if mat_type != MASS_MATRIX:
            K, C = self._mech_tangent(elem_index, pt, X, B, s)
            det = self.con.eval_thermal_strain(elem_index, pt, X, 1.0)
            Jac[self._o_mech : self._o_coup] = K.ravel()
            Jac[self._o_coup : self._o_cond] = -(B.T @ (C @ det))
            Jac[self._o_cond :] = self.con.eval_tangent_heat_flux(elem_index, pt, X).ravel()

        return WeakMatrix(DUt=DUt, DUx=DUx, Jac=Jac)

    # ---- 随伴積 ----

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
        """dfdx += scale * d(Psi·DUt + Psix·DUx)/dx（加算のみ）."""
        d = self._dim
        dd = d * d
        con = self.con

        if not (self.steady_state_flag & STEADY_STATE_MECHANICAL):
            inertia = float(np.dot(Psi[2 : 3 * d : 3], Ut[2 : 3 * d : 3]))
            con.add_density_dv_sens(elem_index, scale * inertia, pt, X, dfdx)
        if not (self.steady_state_flag & STEADY_STATE_THERMAL):
            rho = con.eval_density(elem_index, pt, X)
            c = con.eval_specific_heat(elem_index, pt, X)
            cap = scale * Psi[3 * d + 1] * Ut[3 * d + 1]
            con.add_density_dv_sens(elem_index, cap * c, pt, X, dfdx)
            con.add_specific_heat_dv_sens(elem_index, cap * rho, pt, X, dfdx)

        _, em, B, _ = self._mechanics(elem_index, pt, X, Ut, Ux)
        Psix = np.asarray(Psix, dtype=float)
        con.add_stress_dv_sens(elem_index, scale, pt, X, em, B @ Psix[:dd], dfdx)
        con.add_heat_flux_dv_sens(
            elem_index, scale, pt, X, np.asarray(Ux[dd:], dtype=float), Psix[dd:], dfdx
        )

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
    ) -> AdjXptSensProduct:
        """随伴積とその X, Xd, Ux, Psix に関する微分.

        係数は X, Xd に陽に依存しないので dfdX, dfdXd は 0。
        座標依存性は要素側が Ux = Uξ J を通して連鎖律で扱う。
        """
        d = self._dim
        dd = d * d
        DUt, DUx, B, s, _, _ = self._coefficients(elem_index, pt, X, Ut, Ux)
        Psix = np.asarray(Psix, dtype=float)
        product = float(np.dot(Psi, DUt) + np.dot(Psix, DUx))

        K, _ = self._mech_tangent(elem_index, pt, X, B, s)
        Kc = self.con.eval_tangent_heat_flux(elem_index, pt, X)
        dfdUx = np.empty(d * (d + 1))
        dfdUx[:dd] = K.T @ Psix[:dd]
        dfdUx[dd:] = Kc.T @ Psix[dd:]

        return AdjXptSensProduct(
            product=product,
            dfdX=np.zeros(d),
            dfdXd=np.zeros(dd),
            dfdUx=dfdUx,
            dfdPsix=DUx,
        )

    # ---- 点量 ----

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
    ) -> PointQuantity:
        """点量を評価. 未対応の quantity_type は count=0."""
        d = self._dim
        con = self.con
        if quantity_type == FAILURE_INDEX:
            _, em, _, _ = self._mechanics(elem_index, pt, X, Ut, Ux)
            return PointQuantity(1, np.array([con.eval_failure(elem_index, pt, X, em)]))
        if quantity_type == ELEMENT_DENSITY:
            return PointQuantity(1, np.array([con.eval_density(elem_index, pt, X)]))
        if quantity_type == STRAIN_ENERGY_DENSITY:
            _, em, _, s = self._mechanics(elem_index, pt, X, Ut, Ux)
            return PointQuantity(1, np.array([0.5 * float(s @ em)]))
        if quantity_type == HEAT_FLUX:
            grad = np.asarray(Ux[d * d :], dtype=float)
            return PointQuantity(d, con.eval_heat_flux(elem_index, pt, X, grad))
        if quantity_type == TEMPERATURE:
            return PointQuantity(1, np.array([float(Ut[3 * d])]))
        if quantity_type == ELEMENT_DISPLACEMENT:
            return PointQuantity(d, np.array(Ut[0 : 3 * d : 3], dtype=float))
        return PointQuantity(0, _EMPTY)

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
    ) -> None:
        """dfdx += scale * dfdq · dq/dx（加算のみ）."""
        d = self._dim
        con = self.con
        if quantity_type == FAILURE_INDEX:
            _, em, _, _ = self._mechanics(elem_index, pt, X, Ut, Ux)
            con.add_failure_dv_sens(elem_index, scale * dfdq[0], pt, X, em, dfdx)
        elif quantity_type == ELEMENT_DENSITY:
            con.add_density_dv_sens(elem_index, scale * dfdq[0], pt, X, dfdx)
        elif quantity_type == STRAIN_ENERGY_DENSITY:
            # d(½ e_m·s)/dx = ½ e_m·(∂s/∂x)
            _, em, _, _ = self._mechanics(elem_index, pt, X, Ut, Ux)
            con.add_stress_dv_sens(elem_index, 0.5 * scale * dfdq[0], pt, X, em, em, dfdx)
        elif quantity_type == HEAT_FLUX:
            grad = np.asarray(Ux[d * d :], dtype=float)
            con.add_heat_flux_dv_sens(
                elem_index, scale, pt, X, grad, np.asarray(dfdq[:d], dtype=float), dfdx
            )

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
    ) -> PointQuantitySens:
        """dfdq · dq/d(X, Xd, Ut, Ux). 未対応の quantity_type はすべて 0."""
        d = self._dim
        dd = d * d
        con = self.con
        dfdUt = np.zeros(3 * (d + 1))
        dfdUx = np.zeros(d * (d + 1))

        dfde = None
        if quantity_type == FAILURE_INDEX:
            _, em, B, _ = self._mechanics(elem_index, pt, X, Ut, Ux)
            dfde = dfdq[0] * con.eval_failure_strain_sens(elem_index, pt, X, em).dfde
        elif quantity_type == STRAIN_ENERGY_DENSITY:
            _, em, B, s = self._mechanics(elem_index, pt, X, Ut, Ux)
            dfde = dfdq[0] * s
        elif quantity_type == HEAT_FLUX:
            Kc = con.eval_tangent_heat_flux(elem_index, pt, X)
            dfdUx[dd:] = Kc.T @ np.asarray(dfdq[:d], dtype=float)
        elif quantity_type == TEMPERATURE:
            dfdUt[3 * d] = dfdq[0]
        elif quantity_type == ELEMENT_DISPLACEMENT:
            dfdUt[0 : 3 * d : 3] = dfdq[:d]

        if dfde is not None:
            # e_m = e(Ux) - e_th(T)
            dfdUx[:dd] = B.T @ dfde
            dfdUt[3 * d] = -float(dfde @ con.eval_thermal_strain(elem_index, pt, X, 1.0))

        return PointQuantitySens(
            dfdX=np.zeros(d),
            dfdXd=np.zeros(dd),
            dfdUt=dfdUt,
            dfdUx=dfdUx,
        )

    # ---- 可視化出力 ----

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
    ) -> np.ndarray:
        """write_flag のビットに従い1行分の出力データを返す.

        並び: 節点座標(3) | 変位・温度(vpn) | 全ひずみ | 応力 | 破損指標, 設計値, 熱流束
        etype が不一致なら空配列。
        """
        if etype != self._etype:
            return _EMPTY.copy()

        d = self._dim
        con = self.con
        row: list[np.ndarray] = []
        if write_flag & OUTPUT_NODES:
            Xo = np.zeros(3)
            Xo[: min(3, len(X))] = np.asarray(X, dtype=float)[:3]
            row.append(Xo)
        if write_flag & OUTPUT_DISPLACEMENTS:
            row.append(np.array(Ut[0::3], dtype=float))
        if write_flag & (OUTPUT_STRAINS | OUTPUT_STRESSES | OUTPUT_EXTRAS):
            e, em, _, s = self._mechanics(elem_index, pt, X, Ut, Ux)
            if write_flag & OUTPUT_STRAINS:
                row.append(e)
            if write_flag & OUTPUT_STRESSES:
                row.append(s)
            if write_flag & OUTPUT_EXTRAS:
                grad = np.asarray(Ux[d * d :], dtype=float)
                row.append(
                    np.array(
                        [
                            con.eval_failure(elem_index, pt, X, em),
                            con.eval_design_field_value(elem_index, pt, X, 0),
                        ]
                    )
                )
                row.append(con.eval_heat_flux(elem_index, pt, X, grad))
        if not row:
            return _EMPTY.copy()
        return np.concatenate(row)


# ============================================================
# ElementModelProtocol 適合クラス
# ============================================================


class ThermoelasticityModel2D(_ThermoelasticityModel):
    """2D 平面応力熱弾性モデル.

    状態: (u, v, T)、パラメータ次元 2、ヤコビアン 27 組。
    """

    _dim = 2
    _voigt = _VOIGT_2D
    _jac_pairs = _LINEAR_JAC_PAIRS_2D
    _etype = PLANE_STRESS_ELEMENT


class ThermoelasticityModel3D(_ThermoelasticityModel):
    """3D 固体熱弾性モデル.

    状態: (u, v, w, T)、パラメータ次元 3、ヤコビアン 103 組。
    """

    _dim = 3
    _voigt = _VOIGT_3D
    _jac_pairs = _LINEAR_JAC_PAIRS_3D
    _etype = SOLID_ELEMENT
