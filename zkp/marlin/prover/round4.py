"""
Prover Round 4: 인덱스 일관성 (두 번째 sumcheck)
==================================================

  ┌─────────────────────────────────────────────────┐
  │  Prover → Verifier: σ₂ = t(β₁)                   │
  │  Prover → Verifier: [g₂] (deg ≤ |K|-2)           │
  │  ZeroOverK (K): a(X) - b(X)·(X·g₂(X) + σ₂/|K|)   │
  └─────────────────────────────────────────────────┘

**왜 필요한가?**
  Verifier는 행렬을 모르므로 t(β₁)를 직접 계산할 수 없다.
  t(β₁) = Σ_{κ∈K} f₂(κ),

    f₂(κ) = Σ_M η_M val_M(κ)·Z_H(α)Z_H(β₁) / ((α - row_M(κ))(β₁ - col_M(κ)))

  임을 커밋된 인덱스 다항식의 평가값만으로 확인한다.
  Σ_K f₂ = |K|·(상수항) 이므로 f₂ = X·g₂ + σ₂/|K| 이다.
"""

from zkp.marlin.ahp import INDEX_LABEL, index_combine
from zkp.marlin.errors import NotVanishing
from zkp.marlin.field import FR
from zkp.marlin.kzg import LabeledPolynomial, commit_labeled
from zkp.marlin.parallel import batch_map
from zkp.marlin.polynomial import Polynomial
from zkp.marlin.zero_over_k import ZeroOverK


def f2_evaluations(index_evals, domain_h, alpha, beta, etas):
    """f₂(κ), κ ∈ K.

    Args:
        index_evals: [row_A, col_A, val_A, ..., val_C] 의 K-평가값 리스트
    """
    zh_product = domain_h.evaluate_vanishing(alpha) * domain_h.evaluate_vanishing(beta)
    size = len(index_evals[0])
    evals = [FR(0)] * size
    for m, eta in enumerate(etas):
        rows, cols, vals = index_evals[3 * m:3 * m + 3]
        for k in range(size):
            if vals[k] == 0:
                continue
            evals[k] = evals[k] + eta * vals[k] / ((alpha - rows[k]) * (beta - cols[k]))
    return [e * zh_product for e in evals]


def execute(state):
    """Round 4를 실행한다.

    Args:
        state: ProverState. sigma_2, g_2, proof.index_proof 를 기록한다.
    """
    transcript = state.transcript
    domain_k = state.domain_k
    pk = state.pk

    # ── 1. σ₂ ──
    state.sigma_2 = state.t.polynomial.evaluate(state.beta)
    transcript.append_scalar(b"sigma_2", state.sigma_2)
    state.proof.sigma_2 = state.sigma_2

    # ── 2. f₂ = X·g₂ + σ₂/|K| ──
    index_evals = batch_map(lambda lp: domain_k.fft(lp.polynomial),
                            pk.index_polynomials, state.config)
    f_2 = domain_k.interpolate(
        f2_evaluations(index_evals, state.domain_h, state.alpha, state.beta, state.etas)
    )
    if f_2.coeffs[0] * FR(domain_k.size) != state.sigma_2:
        raise NotVanishing("두 번째 sumcheck: K 위의 합이 σ₂ 와 다릅니다")
    g_2 = Polynomial(f_2.coeffs[1:]) if len(f_2.coeffs) > 1 else Polynomial.zero()
    state.g_2 = LabeledPolynomial(b"g_2", g_2, degree_bound=domain_k.size - 2)

    comm, rand = commit_labeled(state.g_2, state.srs, state.rng)
    state.rands[state.g_2.label] = rand
    transcript.append_commitment(state.g_2.label, comm)
    state.proof.g_2_comm = comm

    # ── 3. ZeroOverK (K) ──
    oracles = list(pk.index_polynomials) + [state.g_2]
    rands = list(pk.index_rands) + [rand]
    combine = index_combine(state.alpha, state.beta, state.etas, state.sigma_2,
                            state.domain_h, domain_k)
    zero_over_k = ZeroOverK(domain_k, combine, INDEX_LABEL)
    state.proof.index_proof = zero_over_k.prove(
        oracles, rands, transcript, state.srs, state.rng, state.config,
    )
