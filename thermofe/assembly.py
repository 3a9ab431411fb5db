"""Protocol ベースの逐次参照アセンブリ.

任意の ElementProtocol 適合要素（WeakFormElement, TractionElement3D など）を
混在させて全体残差・全体ヤコビアン・随伴積を構築する。
ヤコビアンは COO 形式で要素ごとの寄与を蓄積し、最終的に CSR 行列を生成する。

element_groups は [(element, connectivity), ...]:
  element: ElementProtocol 適合オブジェクト
  connectivity: (Ne, nnodes) 内部インデックスの接続配列
要素番号 elem_index はグループ順に通し番号を振る。
全体自由度は node * vars_per_node + k。
"""

from __future__ import annotations

import time as _time

import numpy as np
import scipy.sparse as sp

from thermofe.core.element import ElementProtocol
from thermofe.core.results import JacobianAssemblyResult

# ========== COO ベクトル化ヘルパー ==========


def _vectorized_coo_indices(
    conn_int: np.ndarray,
    nnodes: int,
    vars_per_node: int,
) -> tuple[np.ndarray, np.ndarray]:
    """要素グループの COO row/col インデックスを一括計算.

    Returns:
        (rows, cols): それぞれ (n_elem * m * m,) の int64 配列（m = nnodes * vars_per_node）
    """
    n_elem = len(conn_int)
    m = nnodes * vars_per_node
    offsets = np.arange(vars_per_node, dtype=np.int64)
    all_edofs = (conn_int[:, :nnodes, None] * vars_per_node + offsets[None, None, :]).reshape(
        n_elem, m
    )
    rows = np.repeat(all_edofs, m, axis=1).ravel()
    cols = np.tile(all_edofs, (1, m)).ravel()
    return rows, cols


def _element_dofs(node_ids: np.ndarray, vars_per_node: int) -> np.ndarray:
    return (
        np.asarray(node_ids, dtype=np.int64)[:, None] * vars_per_node
        + np.arange(vars_per_node, dtype=np.int64)[None, :]
    ).ravel()


def _check_groups(
    element_groups: list[tuple[ElementProtocol, np.ndarray]],
) -> tuple[int, int]:
    """(vars_per_node, 全要素数). 節点あたり自由度が揃っていなければ ValueError."""
    if not element_groups:
        raise ValueError("element_groups が空です。")
    vpn = element_groups[0][0].get_vars_per_node()
    for elem, conn in element_groups:
        if elem.get_vars_per_node() != vpn:
            raise ValueError(
                f"vars_per_node が不一致: {elem.get_vars_per_node()} != {vpn}"
            )
        if np.asarray(conn).ndim != 2 or np.asarray(conn).shape[1] < elem.get_num_nodes():
            raise ValueError(
                f"接続配列の形状が不正: {np.asarray(conn).shape}, "
                f"nnodes={elem.get_num_nodes()}"
            )
    n_total = sum(len(conn) for _, conn in element_groups)
    return vpn, n_total


def _state(vec: np.ndarray | None, ndof: int, name: str) -> np.ndarray:
    if vec is None:
        return np.zeros(ndof)
    vec = np.asarray(vec, dtype=float)
    if vec.shape != (ndof,):
        raise ValueError(f"{name} の形状は ({ndof},) が必要: {vec.shape}")
    return vec


def _states(
    ndof: int,
    vars: np.ndarray | None,
    dvars: np.ndarray | None,
    ddvars: np.ndarray | None,
) -> list[np.ndarray]:
    return [
        _state(v, ndof, name)
        for v, name in ((vars, "vars"), (dvars, "dvars"), (ddvars, "ddvars"))
    ]


def _print_progress(label: str, count: int, n_total: int, t0: float) -> None:
    ratio = count / n_total
    bar_len = 40
    filled = int(bar_len * ratio)
    bar = "#" * filled + "-" * (bar_len - filled)
    elapsed = _time.time() - t0
    print(
        f"\r{label} [{bar}] {count}/{n_total} ({ratio * 100:5.1f}% in {elapsed:5.2f} sec)",
        end="",
        flush=True,
    )
    if count == n_total:
        print()


# ========== 公開 API ==========


def assemble_residual(
    nodes: np.ndarray,
    element_groups: list[tuple[ElementProtocol, np.ndarray]],
    vars: np.ndarray,
    dvars: np.ndarray | None = None,
    ddvars: np.ndarray | None = None,
    *,
    time: float = 0.0,
) -> np.ndarray:
    """全体残差ベクトルを組み立てる.

    Args:
        nodes: (N, dim) 節点座標
        element_groups: [(element, connectivity), ...]
        vars, dvars, ddvars: (N * vars_per_node,) 状態とその時間微分（None は 0）
        time: 時刻

    Returns:
        res: (N * vars_per_node,)
    """
    vpn, _ = _check_groups(element_groups)
    nodes = np.asarray(nodes, dtype=float)
    ndof = len(nodes) * vpn
    q = _states(ndof, vars, dvars, ddvars)

    res = np.zeros(ndof)
    elem_index = 0
    for elem, conn in element_groups:
        nnodes = elem.get_num_nodes()
        for row in np.asarray(conn, dtype=int):
            node_ids = row[:nnodes]
            edofs = _element_dofs(node_ids, vpn)
            re = np.zeros(len(edofs))
            elem.add_residual(
                elem_index, time, nodes[node_ids], *(v[edofs] for v in q), re
            )
            np.add.at(res, edofs, re)
            elem_index += 1
    return res


def assemble_jacobian(
    nodes: np.ndarray,
    element_groups: list[tuple[ElementProtocol, np.ndarray]],
    vars: np.ndarray,
    dvars: np.ndarray | None = None,
    ddvars: np.ndarray | None = None,
    *,
    alpha: float = 1.0,
    beta: float = 0.0,
    gamma: float = 0.0,
    time: float = 0.0,
    show_progress: bool = True,
) -> JacobianAssemblyResult:
    """全体ヤコビアン α∂R/∂u + β∂R/∂u̇ + γ∂R/∂ü（COO→CSR）と全体残差.

    DOF インデックス → rows/cols は要素グループ単位でベクトル化計算し、
    要素行列の計算のみ要素ループで行う。

    Returns:
        JacobianAssemblyResult: (K, res)
    """
    vpn, n_total = _check_groups(element_groups)
    nodes = np.asarray(nodes, dtype=float)
    ndof = len(nodes) * vpn
    q = _states(ndof, vars, dvars, ddvars)

    nnz_total = sum(
        (elem.get_num_nodes() * vpn) ** 2 * len(conn) for elem, conn in element_groups
    )
    nnz_total = max(nnz_total, 1)
    rows = np.empty(nnz_total, dtype=np.int64)
    cols = np.empty(nnz_total, dtype=np.int64)
    data = np.empty(nnz_total, dtype=np.float64)
    res = np.zeros(ndof)

    t0 = _time.time()
    progress_step = max(1, n_total // 100)
    elem_index = 0
    k = 0

    for elem, conn in element_groups:
        conn_int = np.asarray(conn, dtype=int)
        nnodes = elem.get_num_nodes()
        m = nnodes * vpn
        block_nnz = m * m
        group_nnz = len(conn_int) * block_nnz

        r, c = _vectorized_coo_indices(conn_int, nnodes, vpn)
        rows[k : k + group_nnz] = r
        cols[k : k + group_nnz] = c

        for i, row in enumerate(conn_int):
            node_ids = row[:nnodes]
            edofs = _element_dofs(node_ids, vpn)
            re = np.zeros(m)
            Ke = np.zeros((m, m))
            elem.add_jacobian(
                elem_index,
                time,
                alpha,
                beta,
                gamma,
                nodes[node_ids],
                *(v[edofs] for v in q),
                re,
                Ke,
            )
            np.add.at(res, edofs, re)
            pos = k + i * block_nnz
            data[pos : pos + block_nnz] = Ke.ravel()

            elem_index += 1
            if show_progress and (elem_index % progress_step == 0 or elem_index == n_total):
                _print_progress("Assemble J", elem_index, n_total, t0)

        k += group_nnz

    K = sp.csr_matrix((data[:k], (rows[:k], cols[:k])), shape=(ndof, ndof))
    K.sum_duplicates()
    return JacobianAssemblyResult(K=K, res=res)


def assemble_adj_res_product(
    nodes: np.ndarray,
    element_groups: list[tuple[ElementProtocol, np.ndarray]],
    psi: np.ndarray,
    num_design_vars: int,
    vars: np.ndarray,
    dvars: np.ndarray | None = None,
    ddvars: np.ndarray | None = None,
    *,
    scale: float = 1.0,
    time: float = 0.0,
) -> np.ndarray:
    """全体随伴積 d(psiᵀR)/dx を設計変数のグローバル番号で組み立てる.

    要素ごとの局所感度を get_design_var_nums の番号で全体配列に加算する。

    Returns:
        dfdx: (num_design_vars,)
    """
    vpn, _ = _check_groups(element_groups)
    nodes = np.asarray(nodes, dtype=float)
    ndof = len(nodes) * vpn
    psi = _state(psi, ndof, "psi")
    q = _states(ndof, vars, dvars, ddvars)

    dfdx = np.zeros(num_design_vars)
    elem_index = 0
    for elem, conn in element_groups:
        nnodes = elem.get_num_nodes()
        nlocal = elem.get_design_vars_per_node() * nnodes
        for row in np.asarray(conn, dtype=int):
            if nlocal > 0:
                node_ids = row[:nnodes]
                edofs = _element_dofs(node_ids, vpn)
                dv_nums = np.zeros(nlocal, dtype=np.intc)
                count = elem.get_design_var_nums(elem_index, dv_nums)
                dfdx_e = np.zeros(nlocal)
                elem.add_adj_res_product(
                    elem_index,
                    time,
                    scale,
                    psi[edofs],
                    nodes[node_ids],
                    *(v[edofs] for v in q),
                    dfdx_e,
                )
                np.add.at(dfdx, dv_nums[:count], dfdx_e[:count])
            elem_index += 1
    return dfdx


def assemble_adj_res_xpt_product(
    nodes: np.ndarray,
    element_groups: list[tuple[ElementProtocol, np.ndarray]],
    psi: np.ndarray,
    vars: np.ndarray,
    dvars: np.ndarray | None = None,
    ddvars: np.ndarray | None = None,
    *,
    scale: float = 1.0,
    time: float = 0.0,
) -> np.ndarray:
    """全体随伴積 d(psiᵀR)/dX を節点座標の形状 (N, dim) で組み立てる."""
    vpn, _ = _check_groups(element_groups)
    nodes = np.asarray(nodes, dtype=float)
    ndof = len(nodes) * vpn
    psi = _state(psi, ndof, "psi")
    q = _states(ndof, vars, dvars, ddvars)

    dim = nodes.shape[1]
    dfdX = np.zeros_like(nodes, dtype=float)
    elem_index = 0
    for elem, conn in element_groups:
        nnodes = elem.get_num_nodes()
        for row in np.asarray(conn, dtype=int):
            node_ids = row[:nnodes]
            edofs = _element_dofs(node_ids, vpn)
            fe = np.zeros(nnodes * dim)
            elem.add_adj_res_xpt_product(
                elem_index,
                time,
                scale,
                psi[edofs],
                nodes[node_ids],
                *(v[edofs] for v in q),
                fe,
            )
            np.add.at(dfdX, node_ids, fe.reshape(nnodes, dim))
            elem_index += 1
    return dfdX
