"""Q4 / HEX8 基底のテスト.

テスト構成:
  1. 形状関数の基本性質（1の分割、節点での Kronecker δ）
  2. 積分則（重み和 = 参照要素体積）
  3. 場の補間と物理勾配（線形場の厳密再現）
  4. HEX8 面積分点（外向き法線、面積）
"""

from __future__ import annotations

import numpy as np
import pytest

from thermofe.core.element import BasisProtocol
from thermofe.elements.basis import Hex8Basis, Quad4Basis

QUAD4_NODES = np.array([[-1, -1], [1, -1], [1, 1], [-1, 1]], dtype=float)
HEX8_NODES = np.array(
    [
        [-1, -1, -1],
        [1, -1, -1],
        [1, 1, -1],
        [-1, 1, -1],
        [-1, -1, 1],
        [1, -1, 1],
        [1, 1, 1],
        [-1, 1, 1],
    ],
    dtype=float,
)


def _distorted_quad() -> np.ndarray:
    return np.array([[0.0, 0.0], [2.0, 0.1], [2.2, 1.3], [-0.1, 1.0]])


def _distorted_hex() -> np.ndarray:
    X = 0.5 * (HEX8_NODES + 1.0) * np.array([2.0, 1.5, 1.0])
    rng = np.random.default_rng(7)
    return X + 0.1 * rng.standard_normal(X.shape)


def _brick(Lx: float, Ly: float, Lz: float) -> np.ndarray:
    return 0.5 * (HEX8_NODES + 1.0) * np.array([Lx, Ly, Lz])


# ============================================================
# 1. 形状関数
# ============================================================


class TestShapeFunctions:
    @pytest.mark.parametrize("basis", [Quad4Basis(), Hex8Basis()])
    def test_protocol_conformance(self, basis):
        assert isinstance(basis, BasisProtocol)

    @pytest.mark.parametrize("basis", [Quad4Basis(), Hex8Basis()])
    def test_partition_of_unity(self, basis):
        rng = np.random.default_rng(0)
        for _ in range(5):
            pt = rng.uniform(-1, 1, basis.num_params)
            N, dNdxi = basis.eval_basis(pt)
            assert N.sum() == pytest.approx(1.0)
            np.testing.assert_allclose(dNdxi.sum(axis=0), 0.0, atol=1e-14)
            assert dNdxi.shape == (basis.num_nodes, basis.num_params)

    @pytest.mark.parametrize(
        "basis, nodes", [(Quad4Basis(), QUAD4_NODES), (Hex8Basis(), HEX8_NODES)]
    )
    def test_kronecker_delta(self, basis, nodes):
        for i, pt in enumerate(nodes):
            N, _ = basis.eval_basis(pt)
            expected = np.zeros(basis.num_nodes)
            expected[i] = 1.0
            np.testing.assert_allclose(N, expected, atol=1e-14)

    @pytest.mark.parametrize("basis", [Quad4Basis(), Hex8Basis()])
    def test_derivative_fd(self, basis):
        pt = np.full(basis.num_params, 0.3)
        _, dNdxi = basis.eval_basis(pt)
        h = 1e-6
        for j in range(basis.num_params):
            dp = np.zeros(basis.num_params)
            dp[j] = h
            Np, _ = basis.eval_basis(pt + dp)
            Nm, _ = basis.eval_basis(pt - dp)
            np.testing.assert_allclose(dNdxi[:, j], (Np - Nm) / (2 * h), atol=1e-8)


# ============================================================
# 2. 積分則
# ============================================================


class TestQuadrature:
    def test_quad4_weights(self):
        basis = Quad4Basis()
        assert basis.get_num_quadrature_points() == 4
        total = sum(basis.get_quadrature_point(n)[0] for n in range(4))
        assert total == pytest.approx(4.0)

    def test_hex8_weights(self):
        basis = Hex8Basis()
        assert basis.get_num_quadrature_points() == 8
        total = sum(basis.get_quadrature_point(n)[0] for n in range(8))
        assert total == pytest.approx(8.0)

    def test_quad4_has_no_faces(self):
        basis = Quad4Basis()
        assert basis.get_num_face_quadrature_points(0) == 0
        with pytest.raises(IndexError):
            basis.get_face_quadrature_point(0, 0)

    @pytest.mark.parametrize(
        "basis, Xpts, volume",
        [
            (Quad4Basis(), np.array([[0, 0], [2, 0], [2, 3], [0, 3]], dtype=float), 6.0),
            (Hex8Basis(), _brick(2.0, 3.0, 0.5), 3.0),
        ],
    )
    def test_volume(self, basis, Xpts, volume):
        vpn = 1
        zeros = np.zeros(basis.num_nodes)
        total = 0.0
        for n in range(basis.get_num_quadrature_points()):
            w, pt = basis.get_quadrature_point(n)
            fg = basis.get_field_gradient(pt, Xpts, vpn, zeros, zeros, zeros)
            total += w * fg.detXd
        assert total == pytest.approx(volume)


# ============================================================
# 3. 場の補間
# ============================================================


class TestFieldGradient:
    @pytest.mark.parametrize(
        "basis, Xpts", [(Quad4Basis(), _distorted_quad()), (Hex8Basis(), _distorted_hex())]
    )
    def test_linear_field_is_exact(self, basis, Xpts):
        """u_k = A_k · X + b_k は歪んだ要素でも勾配 A を厳密に再現."""
        dim = basis.num_params
        vpn = dim + 1
        rng = np.random.default_rng(1)
        A = rng.standard_normal((vpn, dim))
        b = rng.standard_normal(vpn)
        U = Xpts @ A.T + b
        vars = U.ravel()
        dvars = 2.0 * vars
        ddvars = -vars

        pt = np.full(dim, 0.2)
        fg = basis.get_field_gradient(pt, Xpts, vpn, vars, dvars, ddvars)
        u = A @ fg.X + b
        np.testing.assert_allclose(fg.Ut[0::3], u)
        np.testing.assert_allclose(fg.Ut[1::3], 2.0 * u)
        np.testing.assert_allclose(fg.Ut[2::3], -u)
        np.testing.assert_allclose(fg.Ux, A.ravel(), atol=1e-12)
        np.testing.assert_allclose(fg.J @ fg.Xd, np.eye(dim), atol=1e-12)
        assert fg.detXd > 0.0

    def test_interp_fields(self):
        basis = Quad4Basis()
        values = np.arange(8.0)
        out = basis.interp_fields(np.zeros(2), 2, values)
        np.testing.assert_allclose(out, values.reshape(4, 2).mean(axis=0))

    def test_add_weak_residual_is_additive(self):
        basis = Quad4Basis()
        res = np.ones(8)
        DUt = np.zeros(6)
        DUt[0] = 1.0
        basis.add_weak_residual(np.zeros(2), 2.0, np.eye(2), 2, DUt, None, res)
        # 中心で N = 1/4
        np.testing.assert_allclose(res.reshape(4, 2)[:, 0], 1.5)
        np.testing.assert_allclose(res.reshape(4, 2)[:, 1], 1.0)


# ============================================================
# 4. HEX8 面
# ============================================================


class TestHex8Faces:
    @pytest.mark.parametrize("face", range(6))
    def test_outward_normal(self, face):
        basis = Hex8Basis()
        Xpts = _distorted_hex()
        center = Xpts.mean(axis=0)
        assert basis.get_num_face_quadrature_points(face) == 4
        for n in range(4):
            _, pt, tangent = basis.get_face_quadrature_point(face, n)
            fn = basis.get_face_normal(pt, tangent, Xpts)
            assert np.linalg.norm(fn.normal) == pytest.approx(1.0)
            assert fn.normal @ (fn.X - center) > 0.0

    @pytest.mark.parametrize(
        "face, area",
        [(0, 1.5 * 0.5), (1, 1.5 * 0.5), (2, 2.0 * 0.5), (3, 2.0 * 0.5), (4, 3.0), (5, 3.0)],
    )
    def test_face_area(self, face, area):
        basis = Hex8Basis()
        Xpts = _brick(2.0, 1.5, 0.5)
        total = 0.0
        for n in range(4):
            w, pt, tangent = basis.get_face_quadrature_point(face, n)
            total += w * basis.get_face_normal(pt, tangent, Xpts).area
        assert total == pytest.approx(area)

    @pytest.mark.parametrize("face", range(6))
    def test_face_points_lie_on_face(self, face):
        basis = Hex8Basis()
        for n in range(4):
            _, pt, _ = basis.get_face_quadrature_point(face, n)
            N, _ = basis.eval_basis(pt)
            face_nodes = list(Hex8Basis.FACE_NODES[face])
            assert N[face_nodes].sum() == pytest.approx(1.0)
