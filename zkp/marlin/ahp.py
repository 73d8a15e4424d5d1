"""
AHP 관계식 (Prover와 Verifier 공용)
====================================

Prover는 Polynomial 위에서, Verifier는 평가값(FR) 위에서 같은 식을 계산한다.

**만족성 (Round 3)**:
  z_A(X)·z_B(X) - z_C(X) = 0   (X ∈ H)

**인덱스 일관성 (Round 4)**:
  각 행렬 M에 대해 dens_M(X) = (row_M(X) - α)(col_M(X) - β₁) 이라 하면
    b(X) = dens_A · dens_B · dens_C
    a(X) = Z_H(α)Z_H(β₁) · Σ_M η_M · val_M · Π_{M'≠M} dens_M'
    f₂(X) = X·g₂(X) + σ₂/|K|
  K 위에서 a(X) - b(X)·f₂(X) = 0.

  f₂(κ) = Σ_M η_M val_M(κ) Z_H(α)Z_H(β₁) / ((α - row_M(κ))(β₁ - col_M(κ)))
  이고 Σ_κ f₂(κ) = t(β₁) = σ₂ 이다.

**첫 번째 sumcheck (Round 2, β₁에서)**:
  s(β₁) + u_H(α, β₁)·Σ_M η_M z_M(β₁) - σ₂·ẑ(β₁) = h₁(β₁)·Z_H(β₁) + β₁·g₁(β₁)
"""

from zkp.marlin.field import FR

TRANSCRIPT_LABEL = b"index-private-marlin"
SATISFACTION_LABEL = b"satisfaction"
INDEX_LABEL = b"index"


def satisfaction_combine(x, values):
    """z_A·z_B - z_C."""
    return values[0] * values[1] - values[2]


def index_combine(alpha, beta, etas, sigma2, domain_h, domain_k):
    """인덱스 일관성 가상 오라클 F(X, row_A, col_A, val_A, ..., val_C, g₂).

    Returns:
        function: combine(x, values)
    """
    eta_a, eta_b, eta_c = etas
    zh_product = domain_h.evaluate_vanishing(alpha) * domain_h.evaluate_vanishing(beta)
    sigma_term = sigma2 / FR(domain_k.size)

    def combine(x, v):
        dens_a = (v[0] - alpha) * (v[1] - beta)
        dens_b = (v[3] - alpha) * (v[4] - beta)
        dens_c = (v[6] - alpha) * (v[7] - beta)
        b = dens_a * dens_b * dens_c
        a = (v[2] * eta_a * dens_b * dens_c
             + v[5] * eta_b * dens_a * dens_c
             + v[8] * eta_c * dens_a * dens_b) * zh_product
        f = v[9] * x + sigma_term
        return a - b * f

    return combine


def first_sumcheck_holds(domain_h, alpha, beta, etas, sigma2, evals, z_hat_beta):
    """Round 2 sumcheck 식을 β₁에서 확인한다.

    Args:
        evals: dict, 키 w, z_a, z_b, z_c, mask, g_1, h_1
        z_hat_beta: ẑ(β₁) = w(β₁)·V_x(β₁) + x̂(β₁)
    """
    eta_a, eta_b, eta_c = etas
    u_value = domain_h.u_eval(alpha, beta)
    lhs = (evals["mask"]
           + u_value * (eta_a * evals["z_a"] + eta_b * evals["z_b"] + eta_c * evals["z_c"])
           - sigma2 * z_hat_beta)
    rhs = evals["h_1"] * domain_h.evaluate_vanishing(beta) + beta * evals["g_1"]
    return lhs == rhs
