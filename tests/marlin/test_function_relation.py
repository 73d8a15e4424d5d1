"""
입력 이동 가상 오라클과 NonZeroOverK 테스트
=============================================

테스트 데이터: 4×4 행렬 (t = 2), |K| = 8, |H| = 4

  행렬 M (t = 2, 엄밀한 하삼각):       잘못된 행렬 (대각 원소 (2, 2)):
      0, 0, 0, 0                          0, 0, 0, 0
      0, 0, 0, 0                          0, 0, 0, 0
      1, 2, 0, 0                          1, 2, 5, 0
      0, 3, 5, 0                          0, 3, 0, 0

  row_M = ω², ω², ω³, ω³, ω³, ω³, ω³, ω³
  col_M = ω⁰, ω¹, ω², ω², ω², ω², ω², ω²
  잘못된 행렬은 row_M[4] = ω² 이다.

테스트 범위:
  - VirtualOracle 생성 검사 (매핑 벡터 / 이동 계수 길이)
  - 순환 등비수열 h(γX) - ω·h(X) = 0 (같은 오라클을 두 α로 참조)
  - 회전 관계 f(γX) - g(X) = 0 (두 오라클)
  - NonZeroOverK: col_M ≠ 0, row_M - col_M ≠ 0 (대각 원소 없음)
"""

import pytest

from zkp.marlin.domain import Domain
from zkp.marlin.errors import NotVanishing, VerificationFailed
from zkp.marlin.field import FR
from zkp.marlin.kzg import (
    LabeledPolynomial, OpeningProof, combine_commitments, combine_randomness, commit_labeled,
)
from zkp.marlin.non_zero_over_k import NonZeroOverK, NonZeroOverKProof
from zkp.marlin.rng import BlindingRng
from zkp.marlin.srs import SRS
from zkp.marlin.transcript import Transcript
from zkp.marlin.virtual_oracle import VirtualOracle
from zkp.marlin.zero_over_k import ZeroOverK, ZeroOverKProof

T = 2


# ─────────────────────────────────────────────────────────────────────
# Fixtures
# ─────────────────────────────────────────────────────────────────────

@pytest.fixture(scope="module")
def vo_srs():
    return SRS.generate(max_degree=16, seed=13)


@pytest.fixture(scope="module")
def domain_k():
    return Domain(8)


@pytest.fixture(scope="module")
def domain_h():
    return Domain(4)


def _row_evals(domain_h, outside=False):
    w = domain_h.element
    evals = [w(2), w(2), w(3), w(3), w(3), w(3), w(3), w(3)]
    if outside:
        evals[4] = w(2)
    return evals


def _col_evals(domain_h):
    w = domain_h.element
    return [w(0), w(1), w(2), w(2), w(2), w(2), w(2), w(2)]


def _committed(label, evals, domain, srs, rng):
    labeled = LabeledPolynomial(label, domain.interpolate(evals))
    comm, rand = commit_labeled(labeled, srs, rng)
    return labeled, comm, rand


def _geometric(domain_k, domain_h):
    """h(γX) - ω_H·h(X)."""
    ratio = domain_h.element(1)
    return VirtualOracle(lambda x, t: t[0] - t[1] * ratio, [0, 0],
                         [domain_k.element(1), FR(1)])


def _geometric_evals(domain_k, domain_h, broken=False):
    """hᵢ = ω_H^(t+i). ω_H^|K| = 1 이므로 K 위에서 순환한다."""
    evals = [domain_h.element(T + i) for i in range(domain_k.size)]
    if broken:
        evals[4] = domain_h.element(T + 3)
    return evals


# ─────────────────────────────────────────────────────────────────────
# VirtualOracle
# ─────────────────────────────────────────────────────────────────────

class TestVirtualOracle:
    """가상 오라클 생성 테스트."""

    def test_identity_mapping(self):
        vo = VirtualOracle(lambda x, t: t[0])
        assert vo.terms(2) == [(0, FR(1)), (1, FR(1))]

    def test_default_shifting_coefficients(self):
        vo = VirtualOracle(lambda x, t: t[0], [1, 1])
        assert vo.terms(2) == [(1, FR(1)), (1, FR(1))]

    def test_length_mismatch(self):
        with pytest.raises(ValueError):
            VirtualOracle(lambda x, t: t[0], [0, 1], [FR(1)])

    def test_empty_mapping(self):
        with pytest.raises(ValueError):
            VirtualOracle(lambda x, t: t[0], [])

    def test_coefficients_without_mapping(self):
        with pytest.raises(ValueError):
            VirtualOracle(lambda x, t: t[0], None, [FR(2)])

    def test_too_few_oracles(self):
        vo = VirtualOracle(lambda x, t: t[0], [0, 2])
        with pytest.raises(ValueError):
            vo.terms(2)

    def test_term_polynomials_shift_input(self, domain_k):
        gamma = domain_k.element(1)
        p = domain_k.interpolate([FR(i) for i in range(8)])
        vo = VirtualOracle(lambda x, t: t[0], [0, 0], [gamma, 1])
        shifted, plain = vo.term_polynomials([p])
        assert plain == p
        # K 위에서 p(γκᵢ) = p(κᵢ₊₁)
        assert domain_k.fft(shifted) == [FR((i + 1) % 8) for i in range(8)]


# ─────────────────────────────────────────────────────────────────────
# 입력 이동 ZeroOverK
# ─────────────────────────────────────────────────────────────────────

class TestShiftedZeroOverK:
    """같은 오라클을 서로 다른 점에서 여는 ZeroOverK."""

    def _prove(self, domain_k, domain_h, srs, broken=False, seed=b"geo"):
        rng = BlindingRng(seed)
        h, comm, rand = _committed(b"h", _geometric_evals(domain_k, domain_h, broken),
                                   domain_k, srs, rng)
        zk = ZeroOverK(domain_k, _geometric(domain_k, domain_h), b"geo")
        return comm, zk.prove([h], [rand], Transcript(b"geo"), srs, rng)

    def _check(self, domain_k, domain_h, comm, proof, srs):
        zk = ZeroOverK(domain_k, _geometric(domain_k, domain_h), b"geo")
        zk.check([comm], [None], Transcript(b"geo"), proof, srs.verifier_key())

    def test_geometric_sequence_verifies(self, domain_k, domain_h, vo_srs):
        comm, proof = self._prove(domain_k, domain_h, vo_srs)
        self._check(domain_k, domain_h, comm, proof, vo_srs)

    def test_two_opening_points(self, domain_k, domain_h, vo_srs):
        """항 2개 (γρ, ρ) + q(ρ) → 평가값 3개, 열기 증명 2개."""
        _, proof = self._prove(domain_k, domain_h, vo_srs)
        assert len(proof.evaluations) == 3
        assert len(proof.mask_commitments) == 2
        assert len(proof.openings) == 2

    def test_broken_sequence_raises(self, domain_k, domain_h, vo_srs):
        with pytest.raises(NotVanishing):
            self._prove(domain_k, domain_h, vo_srs, broken=True)

    def test_broken_sequence_forged_quotient_rejected(self, domain_k, domain_h, vo_srs,
                                                       monkeypatch):
        original = Domain.divide_by_vanishing
        monkeypatch.setattr(Domain, "divide_by_vanishing",
                            lambda self, poly: (original(self, poly)[0], poly.zero()))
        comm, proof = self._prove(domain_k, domain_h, vo_srs, broken=True)
        monkeypatch.undo()
        with pytest.raises(VerificationFailed):
            self._check(domain_k, domain_h, comm, proof, vo_srs)

    def test_swapped_openings_rejected(self, domain_k, domain_h, vo_srs):
        comm, proof = self._prove(domain_k, domain_h, vo_srs)
        forged = ZeroOverKProof(proof.mask_commitments, proof.q_commitment,
                                proof.evaluations, proof.openings[::-1])
        with pytest.raises(VerificationFailed):
            self._check(domain_k, domain_h, comm, forged, vo_srs)

    def test_unshifted_verifier_rejects(self, domain_k, domain_h, vo_srs):
        """α를 모두 1로 보는 Verifier는 다른 관계를 검사하므로 거부한다."""
        comm, proof = self._prove(domain_k, domain_h, vo_srs)
        ratio = domain_h.element(1)
        zk = ZeroOverK(domain_k, VirtualOracle(lambda x, t: t[0] - t[1] * ratio, [0, 0]), b"geo")
        with pytest.raises(VerificationFailed):
            zk.check([comm], [None], Transcript(b"geo"), proof, vo_srs.verifier_key())

    def test_rotation_of_row_evals(self, domain_k, domain_h, vo_srs):
        """g(κᵢ) = row(κᵢ₊₁) 이면 row(γX) - g(X) 는 K 위에서 0."""
        rng = BlindingRng(b"rotate")
        rows = _row_evals(domain_h)
        row, row_comm, row_rand = _committed(b"row", rows, domain_k, vo_srs, rng)
        g, g_comm, g_rand = _committed(b"g", rows[1:] + rows[:1], domain_k, vo_srs, rng)
        vo = VirtualOracle(lambda x, t: t[0] - t[1], [0, 1], [domain_k.element(1), FR(1)])
        zk = ZeroOverK(domain_k, vo, b"rotate")
        proof = zk.prove([row, g], [row_rand, g_rand], Transcript(), vo_srs, rng)
        zk.check([row_comm, g_comm], [None, None], Transcript(), proof, vo_srs.verifier_key())


# ─────────────────────────────────────────────────────────────────────
# NonZeroOverK
# ─────────────────────────────────────────────────────────────────────

class TestNonZeroOverK:
    """역수 오라클 기반 NonZeroOverK 테스트."""

    def test_col_is_non_zero(self, domain_k, domain_h, vo_srs):
        rng = BlindingRng(b"col")
        col, comm, rand = _committed(b"col", _col_evals(domain_h), domain_k, vo_srs, rng)
        nz = NonZeroOverK(domain_k, b"col")
        proof = nz.prove(col, rand, Transcript(), vo_srs, rng)
        nz.check(comm, None, Transcript(), proof, vo_srs.verifier_key())

    def test_zero_evaluation_raises(self, domain_k, vo_srs):
        evals = [FR(i + 1) for i in range(8)]
        evals[5] = FR(0)
        f, _, rand = _committed(b"f", evals, domain_k, vo_srs, None)
        with pytest.raises(NotVanishing):
            NonZeroOverK(domain_k).prove(f, rand, Transcript(), vo_srs)

    def _difference(self, domain_k, domain_h, srs, outside):
        """row - col 과 그 커밋먼트 [row] - [col] (준동형)."""
        rng = BlindingRng(b"diff")
        row, row_comm, row_rand = _committed(b"row", _row_evals(domain_h, outside),
                                             domain_k, srs, rng)
        col, col_comm, col_rand = _committed(b"col", _col_evals(domain_h), domain_k, srs, rng)
        coeffs = [FR(1), FR(-1)]
        diff = LabeledPolynomial(b"row-col", row.polynomial - col.polynomial)
        comm = combine_commitments([row_comm, col_comm], coeffs)
        rand = combine_randomness([row_rand, col_rand], coeffs)
        return diff, comm, rand, rng

    def test_strictly_lower_triangular_has_no_diagonal(self, domain_k, domain_h, vo_srs):
        diff, comm, rand, rng = self._difference(domain_k, domain_h, vo_srs, outside=False)
        nz = NonZeroOverK(domain_k, b"diagonal")
        proof = nz.prove(diff, rand, Transcript(b"slt"), vo_srs, rng)
        nz.check(comm, None, Transcript(b"slt"), proof, vo_srs.verifier_key())

    def test_diagonal_entry_raises(self, domain_k, domain_h, vo_srs):
        diff, _, rand, rng = self._difference(domain_k, domain_h, vo_srs, outside=True)
        with pytest.raises(NotVanishing):
            NonZeroOverK(domain_k, b"diagonal").prove(diff, rand, Transcript(b"slt"), vo_srs, rng)

    def test_wrong_commitment_rejected(self, domain_k, domain_h, vo_srs):
        """다른 다항식의 커밋먼트로는 검증되지 않는다."""
        rng = BlindingRng(b"wrong")
        col, _, rand = _committed(b"col", _col_evals(domain_h), domain_k, vo_srs, rng)
        _, row_comm, _ = _committed(b"row", _row_evals(domain_h), domain_k, vo_srs, rng)
        nz = NonZeroOverK(domain_k, b"col")
        proof = nz.prove(col, rand, Transcript(), vo_srs, rng)
        with pytest.raises(VerificationFailed):
            nz.check(row_comm, None, Transcript(), proof, vo_srs.verifier_key())

    def test_tampered_inverse_commitment_rejected(self, domain_k, domain_h, vo_srs):
        rng = BlindingRng(b"tamper")
        col, comm, rand = _committed(b"col", _col_evals(domain_h), domain_k, vo_srs, rng)
        nz = NonZeroOverK(domain_k, b"col")
        proof = nz.prove(col, rand, Transcript(), vo_srs, rng)
        forged = NonZeroOverKProof(comm, proof.zero_over_k_proof)
        with pytest.raises(VerificationFailed):
            nz.check(comm, None, Transcript(), forged, vo_srs.verifier_key())

    def test_tampered_opening_rejected(self, domain_k, domain_h, vo_srs):
        rng = BlindingRng(b"opening")
        col, comm, rand = _committed(b"col", _col_evals(domain_h), domain_k, vo_srs, rng)
        nz = NonZeroOverK(domain_k, b"col")
        proof = nz.prove(col, rand, Transcript(), vo_srs, rng)
        inner = proof.zero_over_k_proof
        opening = inner.openings[0]
        forged_inner = ZeroOverKProof(inner.mask_commitments, inner.q_commitment,
                                      inner.evaluations,
                                      [OpeningProof(comm.point, opening.random_v)])
        with pytest.raises(VerificationFailed) as excinfo:
            nz.check(comm, None, Transcript(), NonZeroOverKProof(proof.g_commitment, forged_inner),
                     vo_srs.verifier_key())
        assert excinfo.value.check == "opening"
