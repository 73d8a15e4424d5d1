"""
Prover Round 5: β₁에서의 일괄 열기
====================================

  ┌─────────────────────────────────────────────────┐
  │  Prover → Verifier: w, z_A, z_B, z_C, s, g₁, h₁ (β₁)│
  │  Verifier → Prover: v  (Fiat-Shamir)           │
  │  Prover → Verifier: 일괄 열기 증명               │
  └─────────────────────────────────────────────────┘

t(β₁) = σ₂ 는 Round 4에서 이미 흡수했으므로 다시 보내지 않는다.
열기 순서: w, z_A, z_B, z_C, s, t, g₁ (+shifted), h₁.
"""

from zkp.marlin.kzg import batch_open
from zkp.marlin.parallel import batch_map


def execute(state):
    """Round 5를 실행한다.

    Args:
        state: ProverState. proof.beta_evaluations, proof.beta_opening 을 기록한다.
    """
    transcript = state.transcript
    beta = state.beta

    revealed = [state.w, state.z_a, state.z_b, state.z_c, state.mask, state.g_1, state.h_1]
    evaluations = batch_map(lambda lp: lp.polynomial.evaluate(beta), revealed, state.config)
    transcript.append_scalars(b"beta_evaluations", evaluations)
    state.proof.beta_evaluations = evaluations

    v = transcript.challenge_scalar(b"v")
    opened = [state.w, state.z_a, state.z_b, state.z_c, state.mask, state.t,
              state.g_1, state.h_1]
    rands = [state.rands[lp.label] for lp in opened]
    opening = batch_open(opened, rands, beta, v, state.srs)
    transcript.append_opening(b"beta_opening", opening)
    state.proof.beta_opening = opening
