"""
Prover Round 3: 만족성 ZeroOverK (H)
======================================

  ┌─────────────────────────────────────────────────┐
  │  z_A(X)·z_B(X) - z_C(X) = 0   (X ∈ H)           │
  │  Prover → Verifier: [q], 평가값, 열기 증명         │
  └─────────────────────────────────────────────────┘

Round 2의 lincheck는 z_M = M·z 를 보장하고, 이 라운드는
(A·z) ∘ (B·z) = C·z 를 보장한다.
"""

from zkp.marlin.ahp import SATISFACTION_LABEL, satisfaction_combine
from zkp.marlin.zero_over_k import ZeroOverK


def execute(state):
    """Round 3을 실행한다.

    Args:
        state: ProverState. proof.satisfaction_proof 를 기록한다.
    """
    oracles = [state.z_a, state.z_b, state.z_c]
    rands = [state.rands[o.label] for o in oracles]
    zero_over_k = ZeroOverK(state.domain_h, satisfaction_combine, SATISFACTION_LABEL)
    state.proof.satisfaction_proof = zero_over_k.prove(
        oracles, rands, state.transcript, state.srs, state.rng, state.config,
    )
