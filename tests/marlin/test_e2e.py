"""
Marlin 종단 간 테스트: index → prove → verify
===============================================

테스트 범위:
  - 여러 회로의 완전성 (x³ + x + 5 = 35, square, power chain)
  - 잘못된 공개 입력, 다른 키, 변조된 증명에 대한 건전성
  - 고정 seed 결정론과 seed별 새 랜덤성
  - 병렬 실행과 순차 실행의 바이트 동일성
  - 하이딩을 끈 경우의 검증
  - 진단 모드와 운영 모드의 실패 보고
"""

import logging
import random

import pytest

from zkp.marlin.circuit import Circuit
from zkp.marlin.config import MarlinConfig
from zkp.marlin.errors import DecodingError, VerificationFailed
from zkp.marlin.field import FR
from zkp.marlin.indexer import index
from zkp.marlin.proof import Proof
from zkp.marlin.prover import prove
from zkp.marlin.verifier import check, verify


def _round_trip(circuit, z, srs, config, index_seed=b"i", proof_seed=b"p"):
    pk, vk = index(circuit, srs, seed=index_seed, config=config)
    proof = prove(pk, z, seed=proof_seed, config=config)
    return vk, proof, circuit.public_input(z)


def _tampered(proof_bytes, **changes):
    """증명을 새로 디코딩한 뒤 필드를 덮어쓴다."""
    proof = Proof.from_bytes(proof_bytes)
    for name, value in changes.items():
        setattr(proof, name, value)
    return proof


# ─────────────────────────────────────────────────────────────────────
# Completeness
# ─────────────────────────────────────────────────────────────────────

class TestCompleteness:
    """정직한 증명은 항상 검증을 통과한다."""

    def test_x3_proof_verifies(self, x3_data, x3_proof, config):
        assert verify(x3_data["vk"], x3_data["public_input"], x3_proof, config)

    def test_x3_proof_bytes_verify(self, x3_data, x3_proof_bytes, config):
        assert verify(x3_data["vk"], x3_data["public_input"], x3_proof_bytes, config)

    def test_int_public_input(self, x3_data, x3_proof, config):
        assert verify(x3_data["vk"], [35], x3_proof, config)

    def test_square(self, srs, config):
        circuit, z = Circuit.square(5)
        vk, proof, public_input = _round_trip(circuit, z, srs, config)
        assert (vk.domain_h_size, vk.domain_k_size) == (4, 2)
        assert verify(vk, public_input, proof, config)

    def test_power_chain(self, srs, config):
        circuit, z = Circuit.power_chain(6, base=3)
        vk, proof, public_input = _round_trip(circuit, z, srs, config)
        assert vk.domain_h_size == 16
        assert verify(vk, public_input, proof, config)

    def test_without_hiding(self, x3_data, srs):
        cfg = MarlinConfig(hiding=False)
        vk, proof, public_input = _round_trip(x3_data["circuit"], x3_data["z"], srs, cfg)
        assert proof.beta_opening.random_v is None
        assert verify(vk, public_input, proof, cfg)

    def test_bucketed_domains(self, srs):
        cfg = MarlinConfig(min_constraint_domain_size=8, min_nonzero_domain_size=4)
        circuit, z = Circuit.square(9)
        vk, proof, public_input = _round_trip(circuit, z, srs, cfg)
        assert (vk.domain_h_size, vk.domain_k_size) == (8, 4)
        assert verify(vk, public_input, proof, cfg)


# ─────────────────────────────────────────────────────────────────────
# Soundness
# ─────────────────────────────────────────────────────────────────────

class TestSoundness:
    """잘못된 입력과 변조된 증명은 거부된다."""

    def test_wrong_public_input(self, x3_data, x3_proof, config):
        assert not verify(x3_data["vk"], [FR(36)], x3_proof, config)

    def test_wrong_public_input_length(self, x3_data, x3_proof, config):
        assert not verify(x3_data["vk"], [FR(35), FR(1)], x3_proof, config)
        assert not verify(x3_data["vk"], [], x3_proof, config)

    def test_vk_from_other_indexing(self, x3_data, x3_proof, srs, config):
        """같은 회로를 다른 블라인딩으로 인덱싱하면 다른 VK가 된다."""
        _, other_vk = index(x3_data["circuit"], srs, seed=b"other", config=config)
        assert not verify(other_vk, x3_data["public_input"], x3_proof, config)

    def test_same_shape_different_matrix(self, srs, config):
        """3·x·x = y 의 증명은 x·x = y 키로 검증되지 않는다."""
        square, _ = Circuit.square()
        tripled = Circuit.from_triplets([(0, 2, 3)], [(0, 2, 1)], [(0, 1, 1)], 1, 3, 1)
        _, square_vk = index(square, srs, seed=b"i", config=config)
        tripled_pk, _ = index(tripled, srs, seed=b"i", config=config)
        z = [FR(1), FR(75), FR(5)]
        proof = prove(tripled_pk, z, seed=b"p", config=config)
        assert not verify(square_vk, [FR(75)], proof, config)

    def test_tampered_sigma_2(self, x3_data, x3_proof_bytes, config):
        proof = _tampered(x3_proof_bytes, sigma_2=Proof.from_bytes(x3_proof_bytes).sigma_2 + FR(1))
        assert not verify(x3_data["vk"], x3_data["public_input"], proof, config)

    def test_swapped_commitments(self, x3_data, x3_proof_bytes, config):
        original = Proof.from_bytes(x3_proof_bytes)
        proof = _tampered(x3_proof_bytes, z_a_comm=original.z_b_comm, z_b_comm=original.z_a_comm)
        assert not verify(x3_data["vk"], x3_data["public_input"], proof, config)

    def test_tampered_beta_evaluation(self, x3_data, x3_proof_bytes, config):
        evaluations = list(Proof.from_bytes(x3_proof_bytes).beta_evaluations)
        evaluations[5] = evaluations[5] + FR(1)
        proof = _tampered(x3_proof_bytes, beta_evaluations=evaluations)
        assert not verify(x3_data["vk"], x3_data["public_input"], proof, config)

    def test_random_byte_flips(self, x3_data, x3_proof_bytes, config):
        """한 바이트 변조는 디코딩에 실패하거나 검증에서 거부된다."""
        rng = random.Random(7)
        size = len(x3_proof_bytes)
        positions = sorted({0, size - 1} | {rng.randrange(size) for _ in range(24)})
        for pos in positions:
            data = bytearray(x3_proof_bytes)
            data[pos] ^= 0x01
            try:
                accepted = verify(x3_data["vk"], x3_data["public_input"], bytes(data), config)
            except DecodingError:
                continue
            assert not accepted, f"byte {pos} flip accepted"


# ─────────────────────────────────────────────────────────────────────
# Determinism and parallelism
# ─────────────────────────────────────────────────────────────────────

class TestDeterminism:
    """seed 고정 시 결정론, 병렬 실행 동일성."""

    def test_same_seed_same_bytes(self, x3_data, x3_proof_bytes, config):
        again = prove(x3_data["pk"], x3_data["z"], seed=b"proof-seed", config=config)
        assert again.to_bytes() == x3_proof_bytes

    def test_different_seed_different_bytes(self, x3_data, x3_proof_bytes, config):
        other = prove(x3_data["pk"], x3_data["z"], seed=b"another-seed", config=config)
        assert other.to_bytes() != x3_proof_bytes
        assert verify(x3_data["vk"], x3_data["public_input"], other, config)

    def test_witness_commitments_hidden(self, x3_data, x3_proof, config):
        """같은 witness의 두 증명은 witness 커밋먼트를 공유하지 않는다."""
        other = prove(x3_data["pk"], x3_data["z"], seed=b"another-seed", config=config)
        for name in ("w_comm", "z_a_comm", "z_b_comm", "z_c_comm"):
            assert getattr(other, name) != getattr(x3_proof, name)

    def test_parallel_matches_sequential(self, x3_data, srs, x3_proof_bytes):
        cfg = MarlinConfig(parallel=True, max_workers=4)
        pk, vk = index(x3_data["circuit"], srs, seed=b"index-seed", config=cfg)
        assert vk == x3_data["vk"]
        proof = prove(pk, x3_data["z"], seed=b"proof-seed", config=cfg)
        assert proof.to_bytes() == x3_proof_bytes
        assert verify(vk, x3_data["public_input"], proof, cfg)


# ─────────────────────────────────────────────────────────────────────
# Failure reporting
# ─────────────────────────────────────────────────────────────────────

class TestFailureReporting:
    """운영 모드와 진단 모드의 실패 보고."""

    @pytest.fixture
    def bad_proof(self, x3_proof_bytes):
        evaluations = list(Proof.from_bytes(x3_proof_bytes).beta_evaluations)
        evaluations[0] = evaluations[0] + FR(1)
        return _tampered(x3_proof_bytes, beta_evaluations=evaluations)

    def test_production_hides_check(self, x3_data, bad_proof, config):
        with pytest.raises(VerificationFailed) as excinfo:
            check(x3_data["vk"], x3_data["public_input"], bad_proof, config)
        assert excinfo.value.check is None
        assert excinfo.value.__cause__ is None

    def test_diagnostic_names_check(self, x3_data, bad_proof, caplog):
        cfg = MarlinConfig(diagnostic=True)
        with caplog.at_level(logging.INFO, logger="zkp.marlin.verifier"):
            with pytest.raises(VerificationFailed) as excinfo:
                check(x3_data["vk"], x3_data["public_input"], bad_proof, cfg)
        assert excinfo.value.check == "first_sumcheck"
        assert "first_sumcheck" in caplog.text

    def test_diagnostic_public_input(self, x3_data, x3_proof):
        cfg = MarlinConfig(diagnostic=True)
        with pytest.raises(VerificationFailed) as excinfo:
            check(x3_data["vk"], [], x3_proof, cfg)
        assert excinfo.value.check == "public_input"

    def test_decoding_error_propagates(self, x3_data, x3_proof_bytes, config):
        with pytest.raises(DecodingError):
            verify(x3_data["vk"], x3_data["public_input"], x3_proof_bytes + b"\x00", config)

    def test_config_from_environment(self, x3_data, bad_proof, monkeypatch):
        """config=None 이면 ZKP_MARLIN_DIAGNOSTIC 을 읽는다."""
        monkeypatch.setenv("ZKP_MARLIN_DIAGNOSTIC", "true")
        with pytest.raises(VerificationFailed) as excinfo:
            check(x3_data["vk"], x3_data["public_input"], bad_proof)
        assert excinfo.value.check == "first_sumcheck"
