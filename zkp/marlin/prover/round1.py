"""
Prover Round 1: witness 인코딩
================================

  ┌─────────────────────────────────────────────────┐
  │  Prover → Verifier: [w], [z_A], [z_B], [z_C], [s]│
  │                                                 │
  │  입력:  z = (1, x, w), 행렬 A, B, C              │
  │  출력:  witness 다항식 커밋먼트 5개               │
  └─────────────────────────────────────────────────┘

**witness 다항식**:
  z_M = M·z (M ∈ {A, B, C}) 를 H 위에서 보간한다.
  먼저 z_A ∘ z_B = z_C 를 확인하여, 만족하지 않으면 어떤 커밋도 하기 전에
  ConstraintUnsatisfied를 던진다.

**공개 입력 분리**:
  ẑ(X) = w(X)·V_x(X) + x̂(X)
  w(X) = (ẑ(X) - x̂(X)) / V_x(X)
  ẑ - x̂ 는 H[0..l] 에서 0이므로 V_x로 나누어 떨어진다.

**마스킹 (하이딩)**:
  ẑ, z_A, z_B, z_C 에 (ρ₀ + ρ₁X)·Z_H(X)를 더한다. H 위의 값은 그대로이고
  H 밖의 평가값(β₁, ρ)은 witness에 대해 아무것도 드러내지 않는다.
  첫 번째 sumcheck를 위한 마스크 s(X)는 차수 2|H|이고 Σ_H s = 0 이다
  (s₀ = -(s_|H| + s_2|H|)).
"""

from zkp.marlin.errors import ConstraintUnsatisfied, NotVanishing
from zkp.marlin.field import FR
from zkp.marlin.kzg import LabeledPolynomial, commit_labeled, sample_randomness
from zkp.marlin.parallel import batch_map
from zkp.marlin.polynomial import Polynomial, poly_div
from zkp.marlin.utils import public_input_polynomial, public_input_vanishing


def check_witness(pk, witness):
    """witness 형식과 R1CS 만족 여부를 확인한다.

    Returns:
        tuple: (|H| 길이로 패딩된 z, 공개 입력 x)

    Raises:
        ConstraintUnsatisfied: 길이 오류, z[0] ≠ 1, 또는 제약 불만족
    """
    circuit = pk.circuit
    if len(witness) != circuit.num_variables:
        raise ConstraintUnsatisfied(
            f"witness 길이 {len(witness)} ≠ 변수 수 {circuit.num_variables}"
        )
    z = [v if isinstance(v, FR) else FR(v) for v in witness]
    if z[0] != 1:
        raise ConstraintUnsatisfied("z[0]은 1이어야 합니다")

    n = pk.domain_h.size
    z_a, z_b, z_c = (m.mul_vector(z, n) for m in (circuit.a, circuit.b, circuit.c))
    for i, (a, b, c) in enumerate(zip(z_a, z_b, z_c)):
        if a * b != c:
            raise ConstraintUnsatisfied(f"제약 {i} 불만족")

    z = z + [FR(0)] * (n - len(z))
    return z, circuit.public_input(z)


def _mask(poly, rng, domain):
    """poly + (ρ₀ + ρ₁X)·Z_H(X)."""
    if rng is None:
        return poly
    rho = Polynomial([rng.random_fr(), rng.random_fr()])
    return poly + rho * domain.vanishing_polynomial()


def _sumcheck_mask(rng, n):
    """차수 2n, Σ_H s = 0 인 마스크 다항식."""
    if rng is None:
        return Polynomial.zero()
    coeffs = [rng.random_fr() for _ in range(2 * n + 1)]
    coeffs[0] = -(coeffs[n] + coeffs[2 * n])
    return Polynomial(coeffs)


def execute(state):
    """Round 1을 실행한다.

    Args:
        state: ProverState. w, z_a, z_b, z_c, mask, z_hat 과 커밋먼트를 기록한다.
    """
    pk = state.pk
    domain = state.domain_h
    circuit = pk.circuit
    z = state.z
    n = domain.size

    # ── 1. 행렬-벡터 곱과 보간 ──
    products = batch_map(lambda m: m.mul_vector(z, n), [circuit.a, circuit.b, circuit.c],
                         state.config)
    polys = batch_map(domain.interpolate, [z] + products, state.config)
    z_poly, z_a, z_b, z_c = polys

    # ── 2. 마스킹 (랜덤값은 순차적으로) ──
    rng = state.rng
    z_hat = _mask(z_poly, rng, domain)
    z_a = _mask(z_a, rng, domain)
    z_b = _mask(z_b, rng, domain)
    z_c = _mask(z_c, rng, domain)
    mask = _sumcheck_mask(rng, n)

    # ── 3. 공개 입력 분리 ──
    x_hat = public_input_polynomial(domain, state.public_input)
    v_x = public_input_vanishing(domain, len(state.public_input))
    w, remainder = poly_div(z_hat - x_hat, v_x)
    if not remainder.is_zero():
        raise NotVanishing("ẑ - x̂ 가 V_x로 나누어 떨어지지 않습니다")

    state.z_hat = z_hat
    state.w = LabeledPolynomial(b"w", w)
    state.z_a = LabeledPolynomial(b"z_a", z_a)
    state.z_b = LabeledPolynomial(b"z_b", z_b)
    state.z_c = LabeledPolynomial(b"z_c", z_c)
    state.mask = LabeledPolynomial(b"mask", mask)

    # ── 4. 커밋 ──
    labeled = [state.w, state.z_a, state.z_b, state.z_c, state.mask]
    rands = [sample_randomness(lp, state.srs, rng) for lp in labeled]
    commitments = batch_map(
        lambda pair: commit_labeled(pair[0], state.srs, randomness=pair[1])[0],
        list(zip(labeled, rands)), state.config,
    )
    for lp, rand, comm in zip(labeled, rands, commitments):
        state.rands[lp.label] = rand
        state.transcript.append_commitment(lp.label, comm)

    proof = state.proof
    proof.w_comm, proof.z_a_comm, proof.z_b_comm, proof.z_c_comm, proof.mask_comm = commitments
