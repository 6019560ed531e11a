# mini_corot/kernel/solve.py
"""Linear solve with boundary conditions, mechanism detection, and a load-stepped Newton driver."""

import logging
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np

from ..config import TOLERANCES

logger = logging.getLogger(__name__)


class MechanismError(RuntimeError):
    """Raised when the reduced system is singular or ill-conditioned."""
    pass


class ConvergenceError(RuntimeError):
    """Raised when a Newton increment does not converge."""
    pass


def solve_linear(
    K: np.ndarray,
    F: np.ndarray,
    fixed_dofs: Sequence[int],
    cond_limit: float = 1e14
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Solve K·d = F with zero displacement at fixed_dofs, by partitioning.

    Args:
        K: Global matrix (ndof x ndof); need not be symmetric
        F: Global right-hand side (ndof,)
        fixed_dofs: Constrained DOF indices
        cond_limit: Max condition number of the free block

    Returns:
        d: Solution (ndof,), zero at the fixed DOFs
        R: Reactions K·d - F (ndof,)
        free: Free DOF indices

    Raises:
        MechanismError: If the free block is singular or cond > cond_limit
    """
    ndof = K.shape[0]
    fixed = set(int(i) for i in fixed_dofs)
    free = np.array([i for i in range(ndof) if i not in fixed], dtype=int)

    Kff = K[np.ix_(free, free)]
    cond = np.linalg.cond(Kff)
    if not np.isfinite(cond) or cond > cond_limit:
        raise MechanismError(
            f"Unstable system (cond={cond:.2e}). Check supports. Need cond < {cond_limit:.0e}."
        )

    d = np.zeros(ndof, dtype=float)
    d[free] = np.linalg.solve(Kff, F[free])
    R = K @ d - F
    return d, R, free


def solve_newton(
    response_func: Callable[[np.ndarray], Tuple[np.ndarray, np.ndarray]],
    F_ref: np.ndarray,
    fixed_dofs: Sequence[int],
    n_steps: int = 10,
    tol: Optional[float] = None,
    max_iter: Optional[int] = None,
    commit_func: Optional[Callable[[], None]] = None,
    revert_func: Optional[Callable[[], None]] = None,
    cond_limit: float = 1e14
) -> tuple[np.ndarray, List[int]]:
    """
    Full Newton-Raphson iteration under proportional loading.

    The load F_ref is applied in n_steps equal increments. Within each
    increment the driver repeats

        K_t, R_int = response_func(d)
        r = lambda F_ref - R_int          (free DOFs only)
        K_t dd = r,   d += dd

    until |r| <= tol * max(|lambda F_ref|, 1).

    Args:
        response_func: Sets the trial state to d and returns the global
            tangent and the global resisting forces at that state
        F_ref: Reference load vector (ndof,)
        fixed_dofs: Constrained DOF indices (kept at zero)
        n_steps: Number of load increments
        tol: Relative residual tolerance (default TOLERANCES.residual_tol)
        max_iter: Iterations per increment (default TOLERANCES.max_iter)
        commit_func: Called once per converged increment
        revert_func: Called before raising on a failed increment
        cond_limit: Passed to solve_linear

    Returns:
        d: Converged displacement vector (ndof,)
        iterations: Iteration count of each increment

    Raises:
        ConvergenceError: If an increment fails to converge or the tangent
            becomes singular
    """
    tol = TOLERANCES.residual_tol if tol is None else tol
    max_iter = TOLERANCES.max_iter if max_iter is None else max_iter

    ndof = F_ref.shape[0]
    fixed = np.array(sorted(set(int(i) for i in fixed_dofs)), dtype=int)
    d = np.zeros(ndof, dtype=float)
    iterations = []

    for step in range(1, n_steps + 1):
        lam = step / n_steps
        F = lam * F_ref
        ref = max(np.linalg.norm(np.delete(F, fixed)), 1.0)

        converged = False
        rnorm = np.inf
        for it in range(1, max_iter + 1):
            K, R_int = response_func(d)
            r = F - R_int
            r[fixed] = 0.0
            rnorm = np.linalg.norm(r)
            logger.debug("Step %d iteration %d: |r| = %.3e", step, it, rnorm)
            if rnorm <= tol * ref:
                converged = True
                break
            try:
                dd, _, _ = solve_linear(K, r, fixed, cond_limit)
            except MechanismError as e:
                if revert_func is not None:
                    revert_func()
                raise ConvergenceError(
                    f"Tangent became singular at load step {step}, iteration {it}. {e}"
                ) from e
            d = d + dd

        if not converged:
            if revert_func is not None:
                revert_func()
            raise ConvergenceError(
                f"Load step {step} did not converge after {max_iter} iterations. "
                f"Final residual: {rnorm:.2e}, tolerance: {tol * ref:.2e}"
            )

        if commit_func is not None:
            commit_func()
        iterations.append(it)
        logger.info("Load step %d/%d (lambda=%.3f) converged in %d iterations",
                    step, n_steps, lam, it)

    return d, iterations
