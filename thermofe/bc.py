"""Dirichlet 境界条件.

熱弾性問題では変位成分と温度成分が同じ節点に並ぶので、
拘束 DOF は node * vars_per_node + component で指定する（node_dofs 参照）。
"""

from __future__ import annotations

import numpy as np
import scipy.sparse as sp

from thermofe.core.results import DirichletResult


def node_dofs(
    node_ids: np.ndarray,
    vars_per_node: int,
    components: tuple[int, ...] | list[int],
) -> np.ndarray:
    """節点番号と成分番号から全体 DOF 番号を作る.

    Args:
        node_ids: 節点番号
        vars_per_node: 節点あたり自由度
        components: 成分番号（2D は 0=u, 1=v, 2=T、3D は 0..2=u,v,w, 3=T）

    Returns:
        dofs: (len(node_ids) * len(components),) 節点優先の並び
    """
    comps = np.asarray(components, dtype=int)
    if np.any(comps < 0) or np.any(comps >= vars_per_node):
        raise ValueError(f"components は 0..{vars_per_node - 1}: {list(components)}")
    nodes = np.asarray(node_ids, dtype=int)
    return (nodes[:, None] * vars_per_node + comps[None, :]).ravel()


def apply_dirichlet(
    K: sp.spmatrix,
    f: np.ndarray,
    fixed_dofs: np.ndarray,
    values: float | np.ndarray = 0.0,
) -> DirichletResult:
    """Dirichlet境界条件（行・列消去＋右辺補正）を適用する.

      1) f <- f - K[:, fixed] @ values    （元の K で一括補正）
      2) K <- P K P + I_fixed             （P は自由 DOF の対角射影）
      3) f[fixed] = values

    Args:
        K: 疎行列 (n, n)
        f: 右辺ベクトル (n,)
        fixed_dofs: 拘束するDOFの配列
        values: 規定値（スカラー or 同長配列）

    Returns:
        DirichletResult: (K, f) の NamedTuple。拘束適用後の CSR 行列と右辺ベクトル。
    """
    n = K.shape[0]
    fbc = np.asarray(f, dtype=float).copy()
    if fbc.shape != (n,):
        raise ValueError(f"K と f のサイズが一致していません: {K.shape}, {fbc.shape}")

    fixed_dofs = np.asarray(fixed_dofs, dtype=int)
    if np.isscalar(values):
        vals = np.full(fixed_dofs.shape, float(values))
    else:
        vals = np.asarray(values, dtype=float)
        if vals.shape != fixed_dofs.shape:
            raise ValueError(
                f"values の長さと fixed_dofs の長さが一致していません: "
                f"{vals.shape} != {fixed_dofs.shape}"
            )

    K = sp.csr_matrix(K)
    nz = vals != 0.0
    if np.any(nz):
        fbc -= K.tocsc()[:, fixed_dofs[nz]] @ vals[nz]

    free = np.ones(n)
    free[fixed_dofs] = 0.0
    P = sp.diags(free)
    Kbc = (P @ K @ P + sp.diags(1.0 - free)).tocsr()
    Kbc.eliminate_zeros()

    fbc[fixed_dofs] = vals
    return DirichletResult(K=Kbc, f=fbc)
