"""逐次参照アセンブリのテスト（小規模メッシュでの厳密解比較）.

テスト構成:
  1. COO インデックスと入力検証
  2. 2D 自由熱膨張: ひずみ α ΔT、応力 0
  3. 2D 定常熱伝導パッチテスト（歪んだメッシュで線形温度場を再現）
  4. 3D 一軸圧縮（Hex8 + 上面の圧力トラクション）
  5. 全体随伴積（設計変数・節点座標）vs 差分
"""

from __future__ import annotations

import numpy as np
import pytest
import scipy.sparse.linalg as spla

from thermofe.assembly import (
    _vectorized_coo_indices,
    assemble_adj_res_product,
    assemble_adj_res_xpt_product,
    assemble_jacobian,
    assemble_residual,
)
from thermofe.bc import apply_dirichlet, node_dofs
from thermofe.core.constants import (
    HEAT_FLUX,
    STEADY_STATE_MECHANICAL,
    STEADY_STATE_THERMAL,
)
from thermofe.elements.basis import Hex8Basis, Quad4Basis
from thermofe.elements.element import WeakFormElement
from thermofe.elements.thermoelasticity import ThermoelasticityModel2D, ThermoelasticityModel3D
from thermofe.elements.traction import ConstantTraction, TractionElement3D
from thermofe.materials.constitutive import PlaneStressConstitutive, SolidConstitutive
from thermofe.materials.elastic import MaterialProperties

PROPS = MaterialProperties(
    rho=2.0, specific_heat=3.0, E=10.0, nu=0.3, ys=1.5, alpha=0.1, kappa=1.5
)
STEADY = STEADY_STATE_MECHANICAL | STEADY_STATE_THERMAL


def _grid_2x2(Lx: float = 2.0, Ly: float = 1.0) -> tuple[np.ndarray, np.ndarray]:
    """3×3 節点の 2×2 Q4 メッシュ.

    節点番号:
      6 7 8
      3 4 5
      0 1 2
    """
    xs = np.linspace(0.0, Lx, 3)
    ys = np.linspace(0.0, Ly, 3)
    nodes = np.array([[x, y] for y in ys for x in xs])
    conn = np.array([[0, 1, 4, 3], [1, 2, 5, 4], [3, 4, 7, 6], [4, 5, 8, 7]])
    return nodes, conn


def _solve_linear(nodes, groups, fixed, values, ndof):
    """線形問題を零状態から1回のニュートン反復で解く."""
    zeros = np.zeros(ndof)
    K, res = assemble_jacobian(nodes, groups, zeros, show_progress=False)
    bc = apply_dirichlet(K, -res, fixed, values)
    return spla.spsolve(bc.K.tocsc(), bc.f)


# ============================================================
# 1. COO インデックス・入力検証
# ============================================================


class TestIndices:
    def test_vectorized_coo_indices(self):
        conn = np.array([[2, 0]])
        rows, cols = _vectorized_coo_indices(conn, 2, 3)
        edofs = np.array([6, 7, 8, 0, 1, 2])
        np.testing.assert_array_equal(rows, np.repeat(edofs, 6))
        np.testing.assert_array_equal(cols, np.tile(edofs, 6))

    def test_empty_groups_raise(self):
        with pytest.raises(ValueError):
            assemble_residual(np.zeros((4, 2)), [], np.zeros(12))

    def test_mixed_vars_per_node_raise(self):
        e2 = WeakFormElement(ThermoelasticityModel2D(PlaneStressConstitutive(PROPS)), Quad4Basis())
        e3 = WeakFormElement(ThermoelasticityModel3D(SolidConstitutive(PROPS)), Hex8Basis())
        conn = np.arange(8)[None, :]
        with pytest.raises(ValueError):
            assemble_residual(np.zeros((8, 3)), [(e3, conn), (e2, conn[:, :4])], np.zeros(32))

    def test_state_shape_raises(self):
        nodes, conn = _grid_2x2()
        elem = WeakFormElement(
            ThermoelasticityModel2D(PlaneStressConstitutive(PROPS)), Quad4Basis()
        )
        with pytest.raises(ValueError):
            assemble_residual(nodes, [(elem, conn)], np.zeros(5))

    def test_jacobian_residual_consistent(self):
        nodes, conn = _grid_2x2()
        elem = WeakFormElement(
            ThermoelasticityModel2D(PlaneStressConstitutive(PROPS)), Quad4Basis()
        )
        rng = np.random.default_rng(0)
        q = [0.1 * rng.standard_normal(27) for _ in range(3)]
        K, res = assemble_jacobian(nodes, [(elem, conn)], *q, show_progress=False)
        np.testing.assert_allclose(res, assemble_residual(nodes, [(elem, conn)], *q))
        assert K.shape == (27, 27)

    def test_jacobian_matches_fd(self):
        nodes, conn = _grid_2x2()
        elem = WeakFormElement(
            ThermoelasticityModel2D(PlaneStressConstitutive(PROPS)), Quad4Basis()
        )
        groups = [(elem, conn)]
        vars = 0.1 * np.random.default_rng(1).standard_normal(27)
        K, _ = assemble_jacobian(nodes, groups, vars, show_progress=False)
        h = 1e-6
        J_fd = np.empty((27, 27))
        for j in range(27):
            dv = np.zeros(27)
            dv[j] = h
            J_fd[:, j] = (
                assemble_residual(nodes, groups, vars + dv)
                - assemble_residual(nodes, groups, vars - dv)
            ) / (2 * h)
        np.testing.assert_allclose(K.toarray(), J_fd, atol=1e-7)

    def test_show_progress_prints(self, capsys):
        nodes, conn = _grid_2x2()
        elem = WeakFormElement(
            ThermoelasticityModel2D(PlaneStressConstitutive(PROPS)), Quad4Basis()
        )
        assemble_jacobian(nodes, [(elem, conn)], np.zeros(27), show_progress=True)
        assert "Assemble J" in capsys.readouterr().out


# ============================================================
# 2. 自由熱膨張
# ============================================================


class TestFreeThermalExpansion:
    def test_uniform_temperature_rise(self):
        nodes, conn = _grid_2x2()
        con = PlaneStressConstitutive(PROPS, t=0.5)
        elem = WeakFormElement(ThermoelasticityModel2D(con, steady_state_flag=STEADY), Quad4Basis())
        dT = 4.0
        n = len(nodes)

        # 温度は全節点 ΔT、剛体モードは節点0 (u, v) と節点2 (v) で拘束
        fixed = np.concatenate(
            [node_dofs(np.arange(n), 3, [2]), node_dofs([0], 3, [0, 1]), node_dofs([2], 3, [1])]
        )
        values = np.concatenate([np.full(n, dT), np.zeros(3)])
        q = _solve_linear(nodes, [(elem, conn)], fixed, values, 3 * n)

        U = q.reshape(n, 3)
        eps = PROPS.alpha * dT
        np.testing.assert_allclose(U[:, 0], eps * nodes[:, 0], atol=1e-12)
        np.testing.assert_allclose(U[:, 1], eps * nodes[:, 1], atol=1e-12)

        res = assemble_residual(nodes, [(elem, conn)], q)
        np.testing.assert_allclose(res, 0.0, atol=1e-12)


# ============================================================
# 3. 定常熱伝導パッチテスト
# ============================================================


class TestConductionPatch:
    def test_linear_temperature_on_distorted_mesh(self):
        nodes, conn = _grid_2x2()
        nodes[4] = [1.15, 0.42]
        con = PlaneStressConstitutive(PROPS)
        model = ThermoelasticityModel2D(con, steady_state_flag=STEADY)
        elem = WeakFormElement(model, Quad4Basis())
        n = len(nodes)

        left = np.where(np.isclose(nodes[:, 0], 0.0))[0]
        right = np.where(np.isclose(nodes[:, 0], 2.0))[0]
        fixed = np.concatenate(
            [node_dofs(np.arange(n), 3, [0, 1]), node_dofs(left, 3, [2]), node_dofs(right, 3, [2])]
        )
        values = np.concatenate([np.zeros(2 * n), np.zeros(len(left)), np.ones(len(right))])
        q = _solve_linear(nodes, [(elem, conn)], fixed, values, 3 * n)

        T = q.reshape(n, 3)[:, 2]
        np.testing.assert_allclose(T, nodes[:, 0] / 2.0, atol=1e-12)

        # 積分点の熱流束 κ ∇T = (κ/2, 0)
        basis = Quad4Basis()
        Xe = nodes[conn[3]]
        qe = q.reshape(n, 3)[conn[3]].ravel()
        w, pt = basis.get_quadrature_point(0)
        fg = basis.get_field_gradient(pt, Xe, 3, qe, np.zeros(12), np.zeros(12))
        count, flux = model.eval_point_quantity(0, HEAT_FLUX, 0.0, 0, pt, fg.X, fg.Xd, fg.Ut, fg.Ux)
        assert count == 2
        np.testing.assert_allclose(flux, [PROPS.kappa / 2.0, 0.0], atol=1e-12)


# ============================================================
# 4. 3D 一軸圧縮
# ============================================================


class TestUniaxialCompression3D:
    def test_single_hex_with_pressure(self):
        Lx, Ly, Lz, p = 1.0, 2.0, 3.0, 0.2
        nodes = np.array(
            [
                [0, 0, 0],
                [Lx, 0, 0],
                [Lx, Ly, 0],
                [0, Ly, 0],
                [0, 0, Lz],
                [Lx, 0, Lz],
                [Lx, Ly, Lz],
                [0, Ly, Lz],
            ],
            dtype=float,
        )
        conn = np.arange(8)[None, :]
        solid = WeakFormElement(
            ThermoelasticityModel3D(SolidConstitutive(PROPS), steady_state_flag=STEADY),
            Hex8Basis(),
        )
        T = np.zeros((4, 3))
        T[:3, :3] = -p * np.eye(3)
        load = TractionElement3D(4, 5, Hex8Basis(), ConstantTraction(T))
        groups = [(solid, conn), (load, conn)]

        # 対称面ローラー + 温度 0
        fixed = np.concatenate(
            [
                node_dofs([0, 3, 4, 7], 4, [0]),
                node_dofs([0, 1, 4, 5], 4, [1]),
                node_dofs([0, 1, 2, 3], 4, [2]),
                node_dofs(np.arange(8), 4, [3]),
            ]
        )
        q = _solve_linear(nodes, groups, fixed, np.zeros(len(fixed)), 32)
        U = q.reshape(8, 4)

        ezz = -p / PROPS.E
        exx = PROPS.nu * p / PROPS.E
        np.testing.assert_allclose(U[:, 2], ezz * nodes[:, 2], atol=1e-12)
        np.testing.assert_allclose(U[:, 0], exx * nodes[:, 0], atol=1e-12)
        np.testing.assert_allclose(U[:, 1], exx * nodes[:, 1], atol=1e-12)


# ============================================================
# 5. 全体随伴積
# ============================================================


class TestGlobalAdjoint:
    def _two_groups(self):
        nodes, conn = _grid_2x2()
        groups = []
        cons = []
        for k in range(2):
            con = PlaneStressConstitutive(PROPS, t=0.5 + 0.2 * k, t_num=k)
            cons.append(con)
            model = ThermoelasticityModel2D(con)
            groups.append((WeakFormElement(model, Quad4Basis()), conn[2 * k : 2 * k + 2]))
        return nodes, groups, cons

    def test_dv_product_matches_fd(self):
        nodes, groups, cons = self._two_groups()
        rng = np.random.default_rng(3)
        q = [0.1 * rng.standard_normal(27) for _ in range(3)]
        psi = rng.standard_normal(27)

        dfdx = assemble_adj_res_product(nodes, groups, psi, 2, *q)

        h = 1e-6
        for k, con in enumerate(cons):
            t0 = con.t
            con.t = t0 + h
            fp = psi @ assemble_residual(nodes, groups, *q)
            con.t = t0 - h
            fm = psi @ assemble_residual(nodes, groups, *q)
            con.t = t0
            assert dfdx[k] == pytest.approx((fp - fm) / (2 * h), rel=1e-6)

    def test_xpt_product_matches_fd(self):
        nodes, groups, _ = self._two_groups()
        rng = np.random.default_rng(4)
        q = [0.1 * rng.standard_normal(27) for _ in range(3)]
        psi = rng.standard_normal(27)

        dfdX = assemble_adj_res_xpt_product(nodes, groups, psi, *q)
        assert dfdX.shape == nodes.shape

        h = 1e-6
        for i in range(len(nodes)):
            for j in range(2):
                Xp = nodes.copy()
                Xm = nodes.copy()
                Xp[i, j] += h
                Xm[i, j] -= h
                fd = (
                    psi @ assemble_residual(Xp, groups, *q)
                    - psi @ assemble_residual(Xm, groups, *q)
                ) / (2 * h)
                assert dfdX[i, j] == pytest.approx(fd, rel=1e-5, abs=1e-8)

    def test_no_design_variables(self):
        nodes, conn = _grid_2x2()
        elem = WeakFormElement(
            ThermoelasticityModel2D(PlaneStressConstitutive(PROPS)), Quad4Basis()
        )
        dfdx = assemble_adj_res_product(nodes, [(elem, conn)], np.ones(27), 3, np.zeros(27))
        np.testing.assert_array_equal(dfdx, np.zeros(3))
