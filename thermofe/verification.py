"""解析微分の中心差分検証.

要素モデル（積分点レベル）と要素（要素レベル）の
ヤコビアン・随伴積・設計変数感度・座標感度を中心差分と比較する。

判定:
  max_err     = max |解析 - 差分|
  max_rel_err = max_err / max(|解析|, |差分|)
  passed      = max_err <= atol + rtol * max(|解析|, |差分|)
"""

from __future__ import annotations

from collections.abc import Callable

import numpy as np

from thermofe.core.constants import JACOBIAN_MATRIX
from thermofe.core.element import ElementModelProtocol, ElementProtocol
from thermofe.core.results import VerificationResult

# ============================================================
# 共通ヘルパー
# ============================================================


def _compare(
    name: str,
    analytic: np.ndarray,
    fd: np.ndarray,
    rtol: float,
    atol: float,
    verbose: bool,
) -> VerificationResult:
    analytic = np.asarray(analytic, dtype=float)
    fd = np.asarray(fd, dtype=float)
    err = np.abs(analytic - fd)
    max_err = float(err.max()) if err.size else 0.0
    scale = max(
        float(np.abs(analytic).max()) if analytic.size else 0.0,
        float(np.abs(fd).max()) if fd.size else 0.0,
    )
    max_rel_err = max_err / scale if scale > 0.0 else 0.0
    passed = bool(max_err <= atol + rtol * scale)
    if verbose:
        status = "OK" if passed else "NG"
        print(f"  {name}: max_err={max_err:.3e}, rel={max_rel_err:.3e} [{status}]")
    return VerificationResult(max_err=max_err, max_rel_err=max_rel_err, passed=passed)


def _central_diff(func: Callable[[np.ndarray], np.ndarray], x: np.ndarray, dh: float) -> np.ndarray:
    """func: R^n -> R^m の差分ヤコビアン (m, n)."""
    x = np.asarray(x, dtype=float)
    cols = []
    for j in range(len(x)):
        xp = x.copy()
        xm = x.copy()
        xp[j] += dh
        xm[j] -= dh
        cols.append((np.atleast_1d(func(xp)) - np.atleast_1d(func(xm))) / (2.0 * dh))
    return np.column_stack(cols)


def _point_args(
    model: ElementModelProtocol,
    pt: np.ndarray | None,
    X: np.ndarray | None,
    Xd: np.ndarray | None,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    dim = model.get_num_parameters()
    pt = np.zeros(dim) if pt is None else np.asarray(pt, dtype=float)
    X = np.zeros(dim) if X is None else np.asarray(X, dtype=float)
    Xd = np.eye(dim) if Xd is None else np.asarray(Xd, dtype=float)
    return pt, X, Xd


# ============================================================
# 積分点レベル
# ============================================================


def check_model_jacobian(
    model: ElementModelProtocol,
    Ut: np.ndarray,
    Ux: np.ndarray,
    *,
    elem_index: int = 0,
    time: float = 0.0,
    pt: np.ndarray | None = None,
    X: np.ndarray | None = None,
    Xd: np.ndarray | None = None,
    dh: float = 1e-6,
    rtol: float = 1e-6,
    atol: float = 1e-8,
    verbose: bool = False,
) -> VerificationResult:
    """eval_weak_matrix の値を eval_weak_integrand の中心差分と比較.

    非ゼロパターン外の差分値も 0 であることを含めて検証する。
    """
    pt, X, Xd = _point_args(model, pt, X, Xd)
    Ut = np.asarray(Ut, dtype=float)
    Ux = np.asarray(Ux, dtype=float)
    nt = len(Ut)

    def coeffs(z: np.ndarray) -> np.ndarray:
        DUt, DUx = model.eval_weak_integrand(elem_index, time, 0, pt, X, Xd, z[:nt], z[nt:])
        return np.concatenate([DUt, DUx])

    z0 = np.concatenate([Ut, Ux])
    J_fd = _central_diff(coeffs, z0, dh)

    nnz, pairs = model.get_weak_matrix_nonzeros(JACOBIAN_MATRIX, elem_index)
    _, _, Jac = model.eval_weak_matrix(JACOBIAN_MATRIX, elem_index, time, 0, pt, X, Xd, Ut, Ux)
    if len(Jac) != nnz or len(pairs) != 2 * nnz:
        if verbose:
            print(f"  weak matrix: nnz={nnz}, len(Jac)={len(Jac)}, len(pairs)={len(pairs)} [NG]")
        return VerificationResult(max_err=np.inf, max_rel_err=np.inf, passed=False)

    J_an = np.zeros_like(J_fd)
    np.add.at(J_an, (np.asarray(pairs[0::2]), np.asarray(pairs[1::2])), Jac)
    return _compare("weak matrix", J_an, J_fd, rtol, atol, verbose)


def check_model_adj_xpt_product(
    model: ElementModelProtocol,
    Ut: np.ndarray,
    Ux: np.ndarray,
    Psi: np.ndarray,
    Psix: np.ndarray,
    *,
    elem_index: int = 0,
    time: float = 0.0,
    pt: np.ndarray | None = None,
    X: np.ndarray | None = None,
    Xd: np.ndarray | None = None,
    dh: float = 1e-6,
    rtol: float = 1e-6,
    atol: float = 1e-8,
    verbose: bool = False,
) -> VerificationResult:
    """eval_weak_adj_xpt_sens_product の product, dfdUx, dfdPsix を検証."""
    pt, X, Xd = _point_args(model, pt, X, Xd)
    Ut = np.asarray(Ut, dtype=float)
    Ux = np.asarray(Ux, dtype=float)
    Psi = np.asarray(Psi, dtype=float)
    Psix = np.asarray(Psix, dtype=float)

    def product(ux: np.ndarray) -> np.ndarray:
        DUt, DUx = model.eval_weak_integrand(elem_index, time, 0, pt, X, Xd, Ut, ux)
        return np.array([Psi @ DUt + Psix @ DUx])

    r = model.eval_weak_adj_xpt_sens_product(elem_index, time, 0, pt, X, Xd, Ut, Ux, Psi, Psix)
    _, DUx = model.eval_weak_integrand(elem_index, time, 0, pt, X, Xd, Ut, Ux)

    analytic = np.concatenate([[r.product], r.dfdUx, r.dfdPsix])
    fd = np.concatenate([product(Ux), _central_diff(product, Ux, dh).ravel(), DUx])
    return _compare("adj xpt product", analytic, fd, rtol, atol, verbose)


def check_model_dv_sens(
    model: ElementModelProtocol,
    dvs: np.ndarray,
    Ut: np.ndarray,
    Ux: np.ndarray,
    Psi: np.ndarray,
    Psix: np.ndarray,
    *,
    elem_index: int = 0,
    time: float = 0.0,
    pt: np.ndarray | None = None,
    X: np.ndarray | None = None,
    Xd: np.ndarray | None = None,
    dh: float = 1e-6,
    rtol: float = 1e-6,
    atol: float = 1e-8,
    verbose: bool = False,
) -> VerificationResult:
    """add_weak_adj_product を設計変数の中心差分と比較. 終了時に dvs を設定し直す."""
    pt, X, Xd = _point_args(model, pt, X, Xd)
    dvs = np.asarray(dvs, dtype=float)
    Psi = np.asarray(Psi, dtype=float)
    Psix = np.asarray(Psix, dtype=float)

    def product(x: np.ndarray) -> np.ndarray:
        model.set_design_vars(elem_index, x)
        DUt, DUx = model.eval_weak_integrand(elem_index, time, 0, pt, X, Xd, Ut, Ux)
        return np.array([Psi @ DUt + Psix @ DUx])

    fd = _central_diff(product, dvs, dh).ravel()
    model.set_design_vars(elem_index, dvs)

    dfdx = np.zeros(len(dvs))
    model.add_weak_adj_product(elem_index, time, 1.0, 0, pt, X, Xd, Ut, Ux, Psi, Psix, dfdx)
    return _compare("dv sens", dfdx, fd, rtol, atol, verbose)


def check_point_quantity_sens(
    model: ElementModelProtocol,
    quantity_type: int,
    Ut: np.ndarray,
    Ux: np.ndarray,
    dfdq: np.ndarray,
    *,
    dvs: np.ndarray | None = None,
    elem_index: int = 0,
    time: float = 0.0,
    pt: np.ndarray | None = None,
    X: np.ndarray | None = None,
    Xd: np.ndarray | None = None,
    dh: float = 1e-6,
    rtol: float = 1e-6,
    atol: float = 1e-8,
    verbose: bool = False,
) -> VerificationResult:
    """dfdq·q の状態微分（と dvs 指定時は設計変数微分）を検証."""
    pt, X, Xd = _point_args(model, pt, X, Xd)
    Ut = np.asarray(Ut, dtype=float)
    Ux = np.asarray(Ux, dtype=float)
    dfdq = np.asarray(dfdq, dtype=float)
    nt = len(Ut)

    def fq(z: np.ndarray) -> np.ndarray:
        count, q = model.eval_point_quantity(
            elem_index, quantity_type, time, 0, pt, X, Xd, z[:nt], z[nt:]
        )
        return np.array([dfdq[:count] @ q[:count]])

    fd = _central_diff(fq, np.concatenate([Ut, Ux]), dh).ravel()
    s = model.eval_point_quantity_sens(elem_index, quantity_type, time, 0, pt, X, Xd, Ut, Ux, dfdq)
    analytic = np.concatenate([s.dfdUt, s.dfdUx])

    if dvs is not None:
        dvs = np.asarray(dvs, dtype=float)

        def fx(x: np.ndarray) -> np.ndarray:
            model.set_design_vars(elem_index, x)
            return fq(np.concatenate([Ut, Ux]))

        fd = np.concatenate([fd, _central_diff(fx, dvs, dh).ravel()])
        model.set_design_vars(elem_index, dvs)
        dfdx = np.zeros(len(dvs))
        model.add_point_quantity_dv_sens(
            elem_index, quantity_type, time, 1.0, 0, pt, X, Xd, Ut, Ux, dfdq, dfdx
        )
        analytic = np.concatenate([analytic, dfdx])

    return _compare(f"point quantity {quantity_type}", analytic, fd, rtol, atol, verbose)


# ============================================================
# 要素レベル
# ============================================================


def _element_residual(
    element: ElementProtocol,
    elem_index: int,
    time: float,
    Xpts: np.ndarray,
    vars: np.ndarray,
    dvars: np.ndarray,
    ddvars: np.ndarray,
) -> np.ndarray:
    res = np.zeros(len(vars))
    element.add_residual(elem_index, time, Xpts, vars, dvars, ddvars, res)
    return res


def check_element_jacobian(
    element: ElementProtocol,
    Xpts: np.ndarray,
    vars: np.ndarray,
    dvars: np.ndarray,
    ddvars: np.ndarray,
    *,
    alpha: float = 1.0,
    beta: float = 0.0,
    gamma: float = 0.0,
    elem_index: int = 0,
    time: float = 0.0,
    dh: float = 1e-6,
    rtol: float = 1e-6,
    atol: float = 1e-8,
    verbose: bool = False,
) -> VerificationResult:
    """add_jacobian の行列と残差を add_residual の中心差分と比較."""
    Xpts = np.asarray(Xpts, dtype=float)
    q = [np.asarray(v, dtype=float) for v in (vars, dvars, ddvars)]
    ndof = len(q[0])

    J_fd = np.zeros((ndof, ndof))
    for slot, coef in enumerate((alpha, beta, gamma)):
        if coef == 0.0:
            continue

        def residual(x: np.ndarray, slot: int = slot) -> np.ndarray:
            args = list(q)
            args[slot] = x
            return _element_residual(element, elem_index, time, Xpts, *args)

        J_fd += coef * _central_diff(residual, q[slot], dh)

    res = np.zeros(ndof)
    mat = np.zeros((ndof, ndof))
    element.add_jacobian(elem_index, time, alpha, beta, gamma, Xpts, *q, res, mat)
    res_ref = _element_residual(element, elem_index, time, Xpts, *q)

    return _compare(
        "element jacobian",
        np.concatenate([mat.ravel(), res]),
        np.concatenate([J_fd.ravel(), res_ref]),
        rtol,
        atol,
        verbose,
    )


def check_adj_res_product(
    element: ElementProtocol,
    dvs: np.ndarray,
    psi: np.ndarray,
    Xpts: np.ndarray,
    vars: np.ndarray,
    dvars: np.ndarray,
    ddvars: np.ndarray,
    *,
    elem_index: int = 0,
    time: float = 0.0,
    dh: float = 1e-6,
    rtol: float = 1e-6,
    atol: float = 1e-8,
    verbose: bool = False,
) -> VerificationResult:
    """add_adj_res_product を psiᵀR の設計変数差分と比較. 終了時に dvs を設定し直す."""
    dvs = np.asarray(dvs, dtype=float)
    psi = np.asarray(psi, dtype=float)

    def product(x: np.ndarray) -> np.ndarray:
        element.set_design_vars(elem_index, x)
        res = _element_residual(element, elem_index, time, Xpts, vars, dvars, ddvars)
        return np.array([psi @ res])

    fd = _central_diff(product, dvs, dh).ravel()
    element.set_design_vars(elem_index, dvs)

    dfdx = np.zeros(len(dvs))
    element.add_adj_res_product(elem_index, time, 1.0, psi, Xpts, vars, dvars, ddvars, dfdx)
    return _compare("adj res product", dfdx, fd, rtol, atol, verbose)


def check_adj_res_xpt_product(
    element: ElementProtocol,
    psi: np.ndarray,
    Xpts: np.ndarray,
    vars: np.ndarray,
    dvars: np.ndarray,
    ddvars: np.ndarray,
    *,
    elem_index: int = 0,
    time: float = 0.0,
    dh: float = 1e-6,
    rtol: float = 1e-6,
    atol: float = 1e-8,
    verbose: bool = False,
) -> VerificationResult:
    """add_adj_res_xpt_product を psiᵀR の節点座標差分と比較."""
    Xpts = np.asarray(Xpts, dtype=float)
    psi = np.asarray(psi, dtype=float)

    def product(x: np.ndarray) -> np.ndarray:
        res = _element_residual(element, elem_index, time, x, vars, dvars, ddvars)
        return np.array([psi @ res])

    fd = _central_diff(product, Xpts.ravel(), dh).ravel()
    fXptSens = np.zeros(Xpts.size)
    element.add_adj_res_xpt_product(
        elem_index, time, 1.0, psi, Xpts, vars, dvars, ddvars, fXptSens
    )
    return _compare("adj res xpt product", fXptSens, fd, rtol, atol, verbose)
