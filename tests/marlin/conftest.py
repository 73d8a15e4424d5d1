import sys
import os
import pytest

# 프로젝트 루트를 sys.path에 추가
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '..'))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from zkp.marlin.circuit import Circuit
from zkp.marlin.config import MarlinConfig
from zkp.marlin.indexer import index
from zkp.marlin.prover import prove
from zkp.marlin.srs import SRS


# ── 테스트 상수 ──
SRS_SEED = 2024
SRS_MAX_DEGREE = 64
INDEX_SEED = b"index-seed"
PROOF_SEED = b"proof-seed"


@pytest.fixture(scope="session")
def config():
    """환경 변수에 영향받지 않는 기본 설정."""
    return MarlinConfig()


@pytest.fixture(scope="session")
def srs():
    """회로 테스트용 SRS (max_degree=64)."""
    return SRS.generate(max_degree=SRS_MAX_DEGREE, seed=SRS_SEED)


@pytest.fixture(scope="session")
def x3_data(srs, config):
    """x³ + x + 5 = 35 회로의 인덱싱 결과."""
    circuit, z = Circuit.x3_plus_x_plus_5_eq_35()
    pk, vk = index(circuit, srs, seed=INDEX_SEED, config=config)
    return {"circuit": circuit, "z": z, "pk": pk, "vk": vk,
            "public_input": circuit.public_input(z)}


@pytest.fixture(scope="session")
def x3_proof(x3_data, config):
    """x³ + x + 5 = 35 회로의 증명 (고정 seed)."""
    return prove(x3_data["pk"], x3_data["z"], seed=PROOF_SEED, config=config)


@pytest.fixture(scope="session")
def x3_proof_bytes(x3_proof):
    return x3_proof.to_bytes()
