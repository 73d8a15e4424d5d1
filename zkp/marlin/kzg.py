"""
KZG 다항식 커밋먼트 스킴 (하이딩, 차수 한계, 일괄 열기)
=========================================================

Kate-Zaverucha-Goldberg (KZG) 커밋먼트에 Sonic 스타일 하이딩과
차수 한계(degree bound)를 더한 버전이다.

**커밋먼트**:
  C = p(τ)·G1 + r(τ)·γG1
  r(X)은 블라인딩 다항식 (하이딩이 꺼져 있으면 0).

**열기 증명 (Opening Proof)**:
  "p(z) = y" 임을 증명한다:
  1. q(X) = (p(X) - y)/(X - z),  q_r(X) = (r(X) - r(z))/(X - z)
  2. π = q(τ)·G1 + q_r(τ)·γG1,  random_v = r(z)
  3. 검증: e(C - y·G1 - random_v·γG1 + z·π, G2) == e(π, τ·G2)

**차수 한계 (Degree Bound)**:
  "deg p ≤ d" 를 증명하기 위해 X^(D-d)·p(X) 에도 커밋한다 (shifted 커밋먼트).
  D는 SRS 최대 차수이므로 deg p > d 이면 shifted 다항식을 커밋할 수 없다.
  z에서의 shifted 값은 z^(D-d)·y 이다.

**준동형성 (Homomorphism)**:
  Commit(p) + Commit(q) = Commit(p + q),  s·Commit(p) = Commit(s·p)
  (블라인딩도 같은 선형결합을 따른다)

**일괄 열기 (Batch Opening)**:
  같은 점 z에서 여러 다항식을 v의 거듭제곱으로 결합해 하나의 증명으로 연다.
  각 다항식은 다음 v 거듭제곱을, shifted 부분이 있으면 그 다음 거듭제곱을 사용한다.
  서로 다른 점의 여러 주장(OpeningClaim)은 u의 거듭제곱으로 결합하여
  페어링 두 번으로 검증한다.

사용 예시:
    >>> labeled = LabeledPolynomial(b"w", poly)
    >>> comm, rand = commit_labeled(labeled, srs, rng)
    >>> value, proof = open(poly, FR(7), srs, rand.blinding)
    >>> verify(comm, FR(7), value, proof, srs.verifier_key())  # True
"""

from zkp.marlin.errors import DegreeBoundExceeded
from zkp.marlin.field import (
    FR, Z1, ec_add, ec_eq, ec_lincomb, ec_mul, ec_neg, ec_pairing, ec_sub,
    encode_fr, encode_g1,
)
from zkp.marlin.polynomial import Polynomial


# ─────────────────────────────────────────────────────────────────────
# 자료형
# ─────────────────────────────────────────────────────────────────────

class LabeledPolynomial:
    """레이블과 선택적 차수 한계를 가진 다항식.

    속성:
        label: 바이트열 레이블 (예: b"g_1")
        polynomial: Polynomial
        degree_bound: 차수 한계 d 또는 None
    """

    def __init__(self, label, polynomial, degree_bound=None):
        self.label = label
        self.polynomial = polynomial
        self.degree_bound = degree_bound

    def __repr__(self):
        return f"LabeledPolynomial({self.label!r}, deg={self.polynomial.degree}, bound={self.degree_bound})"


class Commitment:
    """KZG 커밋먼트 (G1 점)와 선택적 shifted 커밋먼트."""

    def __init__(self, point, shifted=None):
        self.point = point
        self.shifted = shifted

    @property
    def has_degree_bound(self):
        return self.shifted is not None

    def __add__(self, other):
        if self.shifted is None and other.shifted is None:
            shifted = None
        else:
            shifted = ec_add(self.shifted or Z1, other.shifted or Z1)
        return Commitment(ec_add(self.point, other.point), shifted)

    def scale(self, scalar):
        shifted = None if self.shifted is None else ec_mul(self.shifted, scalar)
        return Commitment(ec_mul(self.point, scalar), shifted)

    def __eq__(self, other):
        if not isinstance(other, Commitment):
            return False
        if (self.shifted is None) != (other.shifted is None):
            return False
        if self.shifted is not None and not ec_eq(self.shifted, other.shifted):
            return False
        return ec_eq(self.point, other.point)

    def __hash__(self):
        return hash(self.to_bytes())

    def to_bytes(self):
        out = encode_g1(self.point)
        if self.shifted is not None:
            out += encode_g1(self.shifted)
        return out

    def __repr__(self):
        return f"Commitment({self.to_bytes()[:8].hex()}…, shifted={self.shifted is not None})"


class Randomness:
    """커밋먼트 블라인딩 다항식 (주 커밋먼트, shifted 커밋먼트)."""

    def __init__(self, blinding=None, shifted_blinding=None):
        self.blinding = blinding if blinding is not None else Polynomial.zero()
        self.shifted_blinding = shifted_blinding

    @classmethod
    def empty(cls, degree_bound=None):
        return cls(Polynomial.zero(), Polynomial.zero() if degree_bound is not None else None)

    def __add__(self, other):
        if self.shifted_blinding is None and other.shifted_blinding is None:
            shifted = None
        else:
            shifted = ((self.shifted_blinding or Polynomial.zero())
                       + (other.shifted_blinding or Polynomial.zero()))
        return Randomness(self.blinding + other.blinding, shifted)

    def scale(self, scalar):
        shifted = None if self.shifted_blinding is None else self.shifted_blinding * scalar
        return Randomness(self.blinding * scalar, shifted)


class OpeningProof:
    """열기 증명 π와 하이딩 평가값 random_v = r(z) (하이딩이 꺼져 있으면 None)."""

    def __init__(self, w, random_v=None):
        self.w = w
        self.random_v = random_v

    def to_bytes(self):
        out = encode_g1(self.w)
        if self.random_v is not None:
            out += encode_fr(self.random_v)
        return out

    def __eq__(self, other):
        if not isinstance(other, OpeningProof):
            return False
        return self.to_bytes() == other.to_bytes()


class OpeningClaim:
    """"commitment가 point에서 value로 열린다" 는 주장 하나."""

    def __init__(self, commitment, point, value, proof):
        self.commitment = commitment
        self.point = point
        self.value = value
        self.proof = proof


# ─────────────────────────────────────────────────────────────────────
# 기본 연산: commit / open / verify
# ─────────────────────────────────────────────────────────────────────

def commit(polynomial, srs, blinding=None):
    """C = Σ cᵢ·[τⁱ]₁ + Σ rᵢ·[γτⁱ]₁.

    Raises:
        DegreeBoundExceeded: 다항식 차수가 SRS 최대 차수를 초과하거나
            블라인딩 다항식 차수가 hiding_bound를 초과할 때
    """
    if polynomial.degree > srs.max_degree:
        raise DegreeBoundExceeded(
            f"다항식 차수 {polynomial.degree}가 SRS 최대 차수 {srs.max_degree}를 초과합니다"
        )
    point = ec_lincomb(srs.g1_powers, polynomial.coeffs)
    if blinding is not None and not blinding.is_zero():
        if blinding.degree > srs.hiding_bound:
            raise DegreeBoundExceeded(
                f"블라인딩 차수 {blinding.degree}가 hiding bound {srs.hiding_bound}를 초과합니다"
            )
        point = ec_add(point, ec_lincomb(srs.gamma_g1_powers, blinding.coeffs))
    return point


def open(polynomial, point, srs, blinding=None):
    """p(z)와 열기 증명을 반환한다.

    Returns:
        tuple: (value FR, OpeningProof)
    """
    if not isinstance(point, FR):
        point = FR(point)
    quotient, value = polynomial.divide_by_linear(point)
    if blinding is None or blinding.is_zero():
        return value, OpeningProof(commit(quotient, srs))
    blind_quotient, random_v = blinding.divide_by_linear(point)
    return value, OpeningProof(commit(quotient, srs, blind_quotient), random_v)


def verify(commitment, point, value, proof, vk):
    """단일 열기 증명을 검증한다."""
    if isinstance(commitment, Commitment):
        commitment = commitment.point
    return check_claims([OpeningClaim(commitment, point, value, proof)], vk, FR(1))


# ─────────────────────────────────────────────────────────────────────
# 레이블 다항식과 차수 한계
# ─────────────────────────────────────────────────────────────────────

def _shift_amount(srs_degree, degree_bound):
    if degree_bound > srs_degree:
        raise DegreeBoundExceeded(
            f"차수 한계 {degree_bound}가 SRS 최대 차수 {srs_degree}를 초과합니다"
        )
    return srs_degree - degree_bound


def sample_randomness(labeled, srs, rng=None):
    """블라인딩 다항식을 샘플링한다. rng가 None이면 0 (하이딩 없음)."""
    if rng is None:
        return Randomness.empty(labeled.degree_bound)
    blinding = Polynomial.random(srs.hiding_bound, rng)
    shifted = None
    if labeled.degree_bound is not None:
        shifted = Polynomial.random(srs.hiding_bound, rng)
    return Randomness(blinding, shifted)


def commit_labeled(labeled, srs, rng=None, randomness=None):
    """레이블 다항식을 커밋한다.

    Returns:
        tuple: (Commitment, Randomness)

    Raises:
        DegreeBoundExceeded: 다항식이 선언된 차수 한계를 넘을 때
    """
    poly = labeled.polynomial
    if randomness is None:
        randomness = sample_randomness(labeled, srs, rng)
    point = commit(poly, srs, randomness.blinding)
    shifted = None
    if labeled.degree_bound is not None:
        if poly.degree > labeled.degree_bound:
            raise DegreeBoundExceeded(
                f"{labeled.label!r}: 차수 {poly.degree} > 한계 {labeled.degree_bound}"
            )
        k = _shift_amount(srs.max_degree, labeled.degree_bound)
        shifted = commit(poly.shift(k), srs, randomness.shifted_blinding)
    return Commitment(point, shifted), randomness


# ─────────────────────────────────────────────────────────────────────
# 준동형 선형결합
# ─────────────────────────────────────────────────────────────────────

def combine_commitments(commitments, coefficients):
    """Σ cᵢ · Commitmentᵢ."""
    result = None
    for comm, coeff in zip(commitments, coefficients):
        term = comm.scale(coeff)
        result = term if result is None else result + term
    if result is None:
        return Commitment(Z1)
    return result


def combine_randomness(rands, coefficients):
    """Σ cᵢ · Randomnessᵢ (combine_commitments 와 같은 선형결합)."""
    result = None
    for rand, coeff in zip(rands, coefficients):
        term = rand.scale(coeff)
        result = term if result is None else result + term
    if result is None:
        return Randomness.empty()
    return result


# ─────────────────────────────────────────────────────────────────────
# 일괄 열기
# ─────────────────────────────────────────────────────────────────────

def batch_open(labeled_polys, rands, point, v, srs):
    """같은 점에서 여러 다항식을 v로 결합하여 하나의 증명으로 연다.

    결합 다항식 = Σ v^j·pᵢ (+ v^(j+1)·X^(D-d)·pᵢ, 차수 한계가 있는 경우)
    """
    combined = Polynomial.zero()
    combined_blinding = Polynomial.zero()
    power = FR(1)
    for labeled, rand in zip(labeled_polys, rands):
        combined = combined + labeled.polynomial * power
        combined_blinding = combined_blinding + rand.blinding * power
        power = power * v
        if labeled.degree_bound is not None:
            k = _shift_amount(srs.max_degree, labeled.degree_bound)
            combined = combined + labeled.polynomial.shift(k) * power
            if rand.shifted_blinding is not None:
                combined_blinding = combined_blinding + rand.shifted_blinding * power
            power = power * v
    _, proof = open(combined, point, srs, combined_blinding)
    return proof


def batch_claim(commitments, degree_bounds, point, values, v, proof, vk):
    """batch_open 과 같은 v 결합으로 검증용 OpeningClaim을 만든다.

    Raises:
        DegreeBoundExceeded: 차수 한계가 SRS를 넘거나, 차수 한계가 선언된
            커밋먼트에 shifted 부분이 없을 때
    """
    if not isinstance(point, FR):
        point = FR(point)
    points = []
    scalars = []
    combined_value = FR(0)
    power = FR(1)
    for comm, bound, value in zip(commitments, degree_bounds, values):
        points.append(comm.point)
        scalars.append(power)
        combined_value = combined_value + value * power
        power = power * v
        if bound is not None:
            if comm.shifted is None:
                raise DegreeBoundExceeded("차수 한계 커밋먼트에 shifted 부분이 없습니다")
            k = _shift_amount(vk.max_degree, bound)
            points.append(comm.shifted)
            scalars.append(power)
            combined_value = combined_value + value * point ** k * power
            power = power * v
    return OpeningClaim(ec_lincomb(points, scalars), point, combined_value, proof)


def check_claims(claims, vk, u):
    """여러 OpeningClaim을 u의 거듭제곱으로 결합하여 페어링 두 번으로 검증한다.

    각 주장 i에 대해
        e(Cᵢ - yᵢ·G1 - rᵢ·γG1 + zᵢ·πᵢ, G2) == e(πᵢ, τ·G2)
    이므로 u^i 가중합도 같은 형태의 등식을 만족한다.
    """
    lhs_points = []
    lhs_scalars = []
    rhs_points = []
    rhs_scalars = []
    value_sum = FR(0)
    random_sum = FR(0)
    power = FR(1)
    for claim in claims:
        lhs_points.append(claim.commitment)
        lhs_scalars.append(power)
        lhs_points.append(claim.proof.w)
        lhs_scalars.append(power * claim.point)
        rhs_points.append(claim.proof.w)
        rhs_scalars.append(power)
        value_sum = value_sum + claim.value * power
        if claim.proof.random_v is not None:
            random_sum = random_sum + claim.proof.random_v * power
        power = power * u

    lhs = ec_lincomb(lhs_points, lhs_scalars)
    lhs = ec_sub(lhs, ec_mul(vk.g1, value_sum))
    lhs = ec_add(lhs, ec_neg(ec_mul(vk.gamma_g1, random_sum)))
    rhs = ec_lincomb(rhs_points, rhs_scalars)

    return ec_pairing(vk.g2, lhs) == ec_pairing(vk.tau_g2, rhs)
