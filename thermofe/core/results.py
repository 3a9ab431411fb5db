"""メソッド戻り値の型定義.

各モジュールの公開メソッドが返すデータ構造を NamedTuple で統一的に定義する。
NamedTuple を採用する理由:
  - 名前付きフィールドアクセス（result.DUx, result.Jac 等）
  - タプルアンパッキングとの互換性（DUt, DUx = model.eval_weak_integrand(...)）
  - 不変（immutable）
"""

from __future__ import annotations

from typing import NamedTuple

import numpy as np
import scipy.sparse as sp


class WeakIntegrand(NamedTuple):
    """弱形式被積分関数の係数.

    Attributes:
        DUt: (3*vpn,) 試験関数値に掛かる係数（値・1階・2階時間微分スロット）
        DUx: (dim*vpn,) 試験関数勾配に掛かる係数
    """

    DUt: np.ndarray
    DUx: np.ndarray


class WeakMatrixNonzeros(NamedTuple):
    """弱形式ヤコビアンの非ゼロパターン.

    Attributes:
        nnz: 非ゼロ数（= len(pairs) // 2）
        pairs: (2*nnz,) 平坦化した (行, 列) の組。読み取り専用。
    """

    nnz: int
    pairs: np.ndarray


class WeakMatrix(NamedTuple):
    """弱形式係数とそのヤコビアン値.

    Attributes:
        DUt: (3*vpn,) 現状態での係数
        DUx: (dim*vpn,) 現状態での係数
        Jac: (nnz,) 非ゼロパターン順の値
    """

    DUt: np.ndarray
    DUx: np.ndarray
    Jac: np.ndarray


class AdjXptSensProduct(NamedTuple):
    """随伴積 Psi·DUt + Psix·DUx とその座標・勾配微分.

    Attributes:
        product: 随伴積のスカラー値
        dfdX: (dim,) 点座標に関する陽な微分
        dfdXd: (dim*dim,) 座標ヤコビアンに関する陽な微分
        dfdUx: (dim*vpn,) 状態勾配に関する微分
        dfdPsix: (dim*vpn,) Psix に関する微分（= DUx）
    """

    product: float
    dfdX: np.ndarray
    dfdXd: np.ndarray
    dfdUx: np.ndarray
    dfdPsix: np.ndarray


class PointQuantity(NamedTuple):
    """点量の評価結果.

    Attributes:
        count: 量の成分数。未対応の quantity_type では 0。
        quantity: (count,) 値
    """

    count: int
    quantity: np.ndarray


class PointQuantitySens(NamedTuple):
    """点量の X, Xd, Ut, Ux に関する微分（dfdq で縮約済み）."""

    dfdX: np.ndarray
    dfdXd: np.ndarray
    dfdUt: np.ndarray
    dfdUx: np.ndarray


class FailureStrainSens(NamedTuple):
    """破損指標とそのひずみ微分.

    Attributes:
        fail: 破損指標
        dfde: (nstress,) d fail / d e
    """

    fail: float
    dfde: np.ndarray


class FieldGradient(NamedTuple):
    """積分点での幾何量と補間済み状態.

    Attributes:
        detXd: 座標ヤコビアンの行列式
        X: (dim,) 物理座標
        Xd: (dim, dim) dX_i/dξ_j
        J: (dim, dim) Xd の逆行列
        Ut: (3*vpn,) 値・速度・加速度
        Ux: (dim*vpn,) 物理座標での勾配
    """

    detXd: float
    X: np.ndarray
    Xd: np.ndarray
    J: np.ndarray
    Ut: np.ndarray
    Ux: np.ndarray


class FaceNormal(NamedTuple):
    """面積分点での幾何量.

    Attributes:
        area: 面積要素 |t1 × t2|（パラメータ空間面積あたり）
        X: (3,) 物理座標
        Xd: (3, 3) dX_i/dξ_j
        normal: (3,) 外向き単位法線
    """

    area: float
    X: np.ndarray
    Xd: np.ndarray
    normal: np.ndarray


class VerificationResult(NamedTuple):
    """差分検証の結果.

    Attributes:
        max_err: 最大絶対誤差
        max_rel_err: 最大相対誤差
        passed: 許容誤差内なら True
    """

    max_err: float
    max_rel_err: float
    passed: bool


class DirichletResult(NamedTuple):
    """Dirichlet 境界条件適用後の結果.

    Attributes:
        K: 拘束適用後の剛性行列 (CSR)
        f: 拘束適用後の右辺ベクトル (ndof,)
    """

    K: sp.csr_matrix
    f: np.ndarray


class JacobianAssemblyResult(NamedTuple):
    """全体ヤコビアンと残差.

    Attributes:
        K: (ndof, ndof) α·∂R/∂u + β·∂R/∂u̇ + γ·∂R/∂ü (CSR)
        res: (ndof,) 全体残差
    """

    K: sp.csr_matrix
    res: np.ndarray
