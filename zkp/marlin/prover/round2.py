"""
Prover Round 2: 선형화 lincheck (첫 번째 sumcheck)
====================================================

  ┌─────────────────────────────────────────────────┐
  │  Verifier → Prover: α ∉ H, η_A, η_B, η_C        │
  │  Prover → Verifier: [t], [g₁] (deg ≤ |H|-2), [h₁]│
  │  Verifier → Prover: β₁ ∉ H                      │
  └─────────────────────────────────────────────────┘

**lincheck**:
  z_M = M·z 를 한 번에 확인하기 위해 무작위 α, η로 선형결합한다:

    Σ_{h∈H} [ u_H(α, h)·Σ_M η_M z_M(h) - t(h)·ẑ(h) ] = 0

  t(h_j) = Σ_M η_M Σ_k u_H(α, h_k)·M[k, j]

**sumcheck 분해**:
  q₁(X) = s(X) + u_H(α, X)·Σ_M η_M z_M(X) - t(X)·ẑ(X)
        = h₁(X)·Z_H(X) + X·g₁(X)
  Σ_H q₁ = |H|·(상수항) 이므로 합이 0이면 q₁ mod Z_H 의 상수항이 0이다.
  마스크 s(X)는 Σ_H s = 0 이므로 합을 바꾸지 않는다.
"""

from zkp.marlin.errors import NotVanishing
from zkp.marlin.field import FR
from zkp.marlin.kzg import LabeledPolynomial, commit_labeled, sample_randomness
from zkp.marlin.parallel import batch_map
from zkp.marlin.polynomial import Polynomial


def t_evaluations(circuit, domain, alpha, etas):
    """t(h_j) = Σ_M η_M Σ_k u_H(α, h_k)·M[k, j], j = 0..|H|-1."""
    u_values = domain.u_evals_at(alpha)
    evals = [FR(0)] * domain.size
    for matrix, eta in zip((circuit.a, circuit.b, circuit.c), etas):
        for row, col, value in matrix.sorted_entries():
            evals[col] = evals[col] + eta * value * u_values[row]
    return evals


def execute(state):
    """Round 2를 실행한다.

    Args:
        state: ProverState. alpha, etas, t, g_1, h_1, beta 를 기록한다.
    """
    transcript = state.transcript
    domain = state.domain_h
    n = domain.size

    # ── 1. 챌린지 ──
    state.alpha = transcript.challenge_outside(b"alpha", domain)
    state.etas = (
        transcript.challenge_scalar(b"eta_a"),
        transcript.challenge_scalar(b"eta_b"),
        transcript.challenge_scalar(b"eta_c"),
    )
    alpha = state.alpha
    eta_a, eta_b, eta_c = state.etas

    # ── 2. t(X) ──
    t = domain.interpolate(t_evaluations(state.pk.circuit, domain, alpha, state.etas))

    # ── 3. q₁ = h₁·Z_H + X·g₁ ──
    linear = (state.z_a.polynomial * eta_a
              + state.z_b.polynomial * eta_b
              + state.z_c.polynomial * eta_c)
    q_1 = state.mask.polynomial + domain.u_polynomial(alpha) * linear - t * state.z_hat
    h_1, remainder = domain.divide_by_vanishing(q_1)
    if remainder.coeffs[0] != 0:
        raise NotVanishing("첫 번째 sumcheck: H 위의 합이 0이 아닙니다")
    g_1 = Polynomial(remainder.coeffs[1:]) if len(remainder.coeffs) > 1 else Polynomial.zero()

    state.t = LabeledPolynomial(b"t", t)
    state.g_1 = LabeledPolynomial(b"g_1", g_1, degree_bound=n - 2)
    state.h_1 = LabeledPolynomial(b"h_1", h_1)

    # ── 4. 커밋 ──
    labeled = [state.t, state.g_1, state.h_1]
    rands = [sample_randomness(lp, state.srs, state.rng) for lp in labeled]
    commitments = batch_map(
        lambda pair: commit_labeled(pair[0], state.srs, randomness=pair[1])[0],
        list(zip(labeled, rands)), state.config,
    )
    for lp, rand, comm in zip(labeled, rands, commitments):
        state.rands[lp.label] = rand
        transcript.append_commitment(lp.label, comm)
    state.proof.t_comm, state.proof.g_1_comm, state.proof.h_1_comm = commitments

    # ── 5. β₁ ──
    state.beta = transcript.challenge_outside(b"beta", domain)
