"""
R1CS 회로와 Indexer 테스트
============================

테스트 범위:
  - SparseMatrix 생성, 누적, 정렬, 행렬-벡터 곱
  - 회로 형태 검증과 만족성
  - 예제 회로 (x³ + x + 5 = 35, square, power_chain)
  - 인덱스 다항식이 K 위에서 행렬과 일치
  - 도메인 크기, 필요한 SRS 차수, 버킷 패딩
  - 인덱스 프라이버시: VerifyingKey와 증명에서 행렬 계수를 복원할 수 없다
"""

import pytest

from zkp.marlin.circuit import Circuit, SparseMatrix
from zkp.marlin.config import MarlinConfig
from zkp.marlin.errors import DegreeBoundExceeded
from zkp.marlin.field import FR, encode_fr
from zkp.marlin.indexer import INDEX_LABELS, index, index_evaluations, required_degree
from zkp.marlin.prover import prove
from zkp.marlin.serialization import encode_verifying_key
from zkp.marlin.srs import SRS
from zkp.marlin.transcript import Transcript
from zkp.marlin.verifier import verify

INDEX_SEED = b"index-seed"


# ─────────────────────────────────────────────────────────────────────
# SparseMatrix
# ─────────────────────────────────────────────────────────────────────

class TestSparseMatrix:
    """희소 행렬 테스트."""

    def test_from_triplets_accumulates(self):
        m = SparseMatrix.from_triplets([(0, 1, 2), (0, 1, 3), (1, 0, 4)], 2, 2)
        assert m.get(0, 1) == FR(5)
        assert m.nnz == 2

    def test_zero_entries_dropped(self):
        m = SparseMatrix.from_triplets([(0, 0, 1), (0, 0, -1)], 1, 1)
        assert m.nnz == 0
        assert m.get(0, 0) == FR(0)

    def test_out_of_range_rejected(self):
        with pytest.raises(ValueError):
            SparseMatrix.from_triplets([(2, 0, 1)], 2, 2)

    def test_sorted_entries_row_major(self):
        m = SparseMatrix.from_triplets([(1, 0, 1), (0, 2, 1), (0, 1, 1)], 2, 3)
        assert [(r, c) for r, c, _ in m.sorted_entries()] == [(0, 1), (0, 2), (1, 0)]

    def test_mul_vector(self):
        m = SparseMatrix.from_triplets([(0, 0, 2), (0, 1, 3), (1, 1, 4)], 2, 2)
        assert m.mul_vector([FR(5), FR(7)]) == [FR(31), FR(28)]

    def test_mul_vector_pads(self):
        m = SparseMatrix.from_triplets([(0, 0, 1)], 1, 1)
        assert m.mul_vector([FR(9)], length=4) == [FR(9), FR(0), FR(0), FR(0)]


# ─────────────────────────────────────────────────────────────────────
# Circuit
# ─────────────────────────────────────────────────────────────────────

class TestCircuit:
    """R1CS 회로 테스트."""

    def test_x3_shape(self):
        circuit, z = Circuit.x3_plus_x_plus_5_eq_35()
        assert (circuit.num_constraints, circuit.num_variables, circuit.num_public_inputs) == (3, 5, 1)
        assert (circuit.a.nnz, circuit.b.nnz, circuit.c.nnz) == (5, 3, 3)
        assert circuit.max_nnz == 5

    def test_x3_satisfied(self):
        circuit, z = Circuit.x3_plus_x_plus_5_eq_35()
        assert circuit.is_satisfied(z)
        assert circuit.public_input(z) == [FR(35)]

    def test_wrong_witness_not_satisfied(self):
        circuit, z = Circuit.x3_plus_x_plus_5_eq_35()
        z[3] = FR(10)
        assert not circuit.is_satisfied(z)

    def test_z0_must_be_one(self):
        circuit, z = Circuit.x3_plus_x_plus_5_eq_35()
        z[0] = FR(2)
        assert not circuit.is_satisfied(z)

    def test_square(self):
        circuit, z = Circuit.square(7)
        assert circuit.is_satisfied(z)
        assert circuit.public_input(z) == [FR(49)]

    @pytest.mark.parametrize("length", [1, 2, 6])
    def test_power_chain(self, length):
        circuit, z = Circuit.power_chain(length, base=3)
        assert circuit.num_constraints == length + 1
        assert circuit.num_variables == length + 3
        assert circuit.is_satisfied(z)
        assert circuit.public_input(z) == [FR(3), FR(3 ** length)]

    def test_power_chain_rejects_zero_length(self):
        with pytest.raises(ValueError):
            Circuit.power_chain(0)

    def test_shape_mismatch_rejected(self):
        a = SparseMatrix(2, 3)
        b = SparseMatrix(2, 3)
        c = SparseMatrix(3, 3)
        with pytest.raises(ValueError):
            Circuit(a, b, c, 2, 3, 1)

    def test_too_many_public_inputs_rejected(self):
        m = SparseMatrix(1, 2)
        with pytest.raises(ValueError):
            Circuit(m, m, m, 1, 2, 2)


# ─────────────────────────────────────────────────────────────────────
# Indexer
# ─────────────────────────────────────────────────────────────────────

class TestIndexer:
    """Indexer 테스트."""

    def test_domain_sizes(self, x3_data):
        pk, vk = x3_data["pk"], x3_data["vk"]
        assert pk.domain_h.size == 8
        assert pk.domain_k.size == 8
        assert (vk.domain_h_size, vk.domain_k_size) == (8, 8)
        assert vk.num_public_inputs == 1

    def test_required_degree(self):
        assert required_degree(8, 8) == 49
        assert required_degree(4, 2) == 13
        assert required_degree(16, 2) == 32

    def test_nine_index_polynomials(self, x3_data):
        pk, vk = x3_data["pk"], x3_data["vk"]
        assert [lp.label for lp in pk.index_polynomials] == list(INDEX_LABELS)
        assert len(vk.index_commitments) == 9

    def test_index_polynomials_encode_matrix(self, x3_data):
        """K 위의 row/col/val 이 A의 모든 0이 아닌 원소를 재현한다."""
        pk = x3_data["pk"]
        circuit = x3_data["circuit"]
        domain_h, domain_k = pk.domain_h, pk.domain_k
        row_a, col_a, val_a = (lp.polynomial for lp in pk.index_polynomials[:3])
        n_inv = FR(1) / FR(domain_h.size)
        for t, (r, c, m) in enumerate(circuit.a.sorted_entries()):
            kappa = domain_k.element(t)
            assert row_a.evaluate(kappa) == domain_h.element(r)
            assert col_a.evaluate(kappa) == domain_h.element(c)
            assert val_a.evaluate(kappa) == m * domain_h.element(c) * n_inv

    def test_padding_entries(self, x3_data):
        """남는 K 자리는 row = col = 1, val = 0."""
        pk = x3_data["pk"]
        rows, cols, vals = index_evaluations(x3_data["circuit"].b, pk.domain_h, pk.domain_k)
        assert len(rows) == pk.domain_k.size
        for k in range(x3_data["circuit"].b.nnz, pk.domain_k.size):
            assert rows[k] == FR(1) and cols[k] == FR(1) and vals[k] == FR(0)

    def test_srs_too_small(self):
        circuit, _ = Circuit.x3_plus_x_plus_5_eq_35()
        srs = SRS.generate(max_degree=16, seed=1)
        with pytest.raises(DegreeBoundExceeded):
            index(circuit, srs, seed=INDEX_SEED, config=MarlinConfig())

    def test_bucket_padding(self, srs):
        """min_*_domain_size 로 도메인을 공개 버킷까지 올린다."""
        circuit, _ = Circuit.square()
        cfg = MarlinConfig(min_constraint_domain_size=8, min_nonzero_domain_size=4)
        pk, vk = index(circuit, srs, seed=INDEX_SEED, config=cfg)
        assert (vk.domain_h_size, vk.domain_k_size) == (8, 4)

    def test_deterministic_with_seed(self, srs, config):
        circuit, _ = Circuit.square()
        _, vk1 = index(circuit, srs, seed=INDEX_SEED, config=config)
        _, vk2 = index(circuit, srs, seed=INDEX_SEED, config=config)
        assert vk1 == vk2


class TestIndexPrivacy:
    """인덱스 프라이버시 테스트."""

    def test_vk_has_no_matrix_coefficients(self, x3_data):
        """A의 상수 5는 VK 바이트열에 스칼라로 나타나지 않는다."""
        data = encode_verifying_key(x3_data["vk"])
        assert encode_fr(5) not in data
        assert not hasattr(x3_data["vk"], "circuit")

    def test_hiding_commitments_differ_per_seed(self, srs, config):
        """새 블라인딩으로 다시 인덱싱하면 모든 커밋먼트가 바뀐다."""
        circuit, _ = Circuit.square()
        _, vk1 = index(circuit, srs, seed=b"one", config=config)
        _, vk2 = index(circuit, srs, seed=b"two", config=config)
        for c1, c2 in zip(vk1.index_commitments, vk2.index_commitments):
            assert c1 != c2

    def test_same_shape_circuits_share_vk_layout(self, srs, config):
        """계수만 다른 회로는 같은 크기의 VK를 만든다."""
        c1, _ = Circuit.square()
        c2 = Circuit.from_triplets([(0, 2, 3)], [(0, 2, 1)], [(0, 1, 1)], 1, 3, 1)
        _, vk1 = index(c1, srs, seed=INDEX_SEED, config=config)
        _, vk2 = index(c2, srs, seed=INDEX_SEED, config=config)
        b1, b2 = encode_verifying_key(vk1), encode_verifying_key(vk2)
        assert len(b1) == len(b2)
        assert b1[:20] == b2[:20]

    def test_without_hiding_commitments_are_deterministic(self, srs):
        circuit, _ = Circuit.square()
        cfg = MarlinConfig(hiding=False)
        _, vk1 = index(circuit, srs, seed=b"one", config=cfg)
        _, vk2 = index(circuit, srs, seed=b"two", config=cfg)
        assert vk1 == vk2


# ─────────────────────────────────────────────────────────────────────
# 증명에서 행렬 계수 복원 시도
# ─────────────────────────────────────────────────────────────────────

SECRET = 12345


def _scaled_square(coefficient):
    """coefficient·x·x = y (x = 5). square 회로와 같은 모양."""
    circuit = Circuit.from_triplets([(0, 2, coefficient)], [(0, 2, 1)], [(0, 1, 1)], 1, 3, 1)
    x = FR(5)
    return circuit, [FR(1), FR(coefficient) * x * x, x]


def _verifier_rho(monkeypatch, vk, public_input, proof, config):
    """Verifier가 트랜스크립트에서 얻는 인덱스 ZeroOverK의 ρ."""
    seen = []
    original = Transcript.challenge_outside

    def recording(self, label, domain):
        value = original(self, label, domain)
        if label == b"rho":
            seen.append(value)
        return value

    monkeypatch.setattr(Transcript, "challenge_outside", recording)
    assert verify(vk, public_input, proof, config)
    monkeypatch.undo()
    # 만족성 ρ 다음이 인덱스 ρ
    assert len(seen) == 2
    return seen[1]


def _recover(vk, proof, rho):
    """nnz(A) = 1 이고 패딩이 공개되어 있으므로
        col_A(ρ) = c·L₀(ρ) + 1·L₁(ρ),  val_A(ρ) = v·L₀(ρ)
    를 풀어 (c, v·|H|/c) 를 얻는다. 평가값이 원래 값이라면 (ω_H^2, 계수)."""
    domain_k = vk.domain_k
    l0 = domain_k.lagrange_eval(0, rho)
    l1 = domain_k.lagrange_eval(1, rho)
    col_eval, val_eval = proof.index_proof.evaluations[1:3]
    col = (col_eval - l1) / l0
    val = val_eval / l0
    return col, val * FR(vk.domain_h.size) / col


class TestProofIndexPrivacy:
    """증명의 인덱스 ZeroOverK 평가값에서 계수를 복원할 수 없다."""

    def _prove(self, coefficient, srs, config, proof_seed=b"p"):
        circuit, z = _scaled_square(coefficient)
        pk, vk = index(circuit, srs, seed=INDEX_SEED, config=config)
        proof = prove(pk, z, seed=proof_seed, config=config)
        return vk, circuit.public_input(z), proof

    def test_reconstruction_recovers_coefficient_without_hiding(self, srs, monkeypatch):
        """하이딩을 끄면 평가값이 그대로 드러나 계수가 복원된다 (복원 식 자체의 확인)."""
        cfg = MarlinConfig(hiding=False)
        vk, public_input, proof = self._prove(SECRET, srs, cfg)
        rho = _verifier_rho(monkeypatch, vk, public_input, proof, cfg)
        col, coefficient = _recover(vk, proof, rho)
        assert col == vk.domain_h.element(2)
        assert coefficient == FR(SECRET)

    def test_coefficient_not_recoverable(self, srs, config, monkeypatch):
        vk, public_input, proof = self._prove(SECRET, srs, config)
        rho = _verifier_rho(monkeypatch, vk, public_input, proof, config)
        col, coefficient = _recover(vk, proof, rho)
        assert coefficient != FR(SECRET)
        assert not vk.domain_h.contains(col)

    def test_same_shape_circuits_indistinguishable(self, srs, config, monkeypatch):
        """계수가 다른 두 회로 모두, 증명마다 복원값이 새로 바뀌고 실제 계수와 무관하다."""
        recovered = []
        for coefficient in (SECRET, 3):
            for seed in (b"p1", b"p2"):
                vk, public_input, proof = self._prove(coefficient, srs, config, seed)
                rho = _verifier_rho(monkeypatch, vk, public_input, proof, config)
                col, value = _recover(vk, proof, rho)
                assert value not in (FR(SECRET), FR(3))
                assert not vk.domain_h.contains(col)
                recovered.append(int(value))
        assert len(set(recovered)) == len(recovered)

    def test_index_masks_fresh_per_proof(self, srs, config):
        vk, _, first = self._prove(SECRET, srs, config, b"p1")
        _, _, second = self._prove(SECRET, srs, config, b"p2")
        for a, b in zip(first.index_proof.mask_commitments, second.index_proof.mask_commitments):
            assert a != b
