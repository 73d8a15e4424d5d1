"""
증명 컨테이너
==============

Prover의 각 라운드가 채우는 증명 요소. 필드 순서가 곧 직렬화 순서다.
"""


class Proof:
    """Index-Private Marlin 증명.

    Round 1 (witness 커밋먼트):
        w_comm, z_a_comm, z_b_comm, z_c_comm, mask_comm: Commitment

    Round 2 (첫 번째 sumcheck):
        t_comm, g_1_comm (shifted 포함), h_1_comm: Commitment

    Round 3:
        satisfaction_proof: ZeroOverKProof (H)

    Round 4 (인덱스 일관성):
        sigma_2: FR
        g_2_comm: Commitment (shifted 포함)
        index_proof: ZeroOverKProof (K)

    Round 5 (β₁ 열기):
        beta_evaluations: [w, z_A, z_B, z_C, s, g₁, h₁] (β₁)
        beta_opening: OpeningProof
    """

    def __init__(self):
        # Round 1
        self.w_comm = None
        self.z_a_comm = None
        self.z_b_comm = None
        self.z_c_comm = None
        self.mask_comm = None
        # Round 2
        self.t_comm = None
        self.g_1_comm = None
        self.h_1_comm = None
        # Round 3
        self.satisfaction_proof = None
        # Round 4
        self.sigma_2 = None
        self.g_2_comm = None
        self.index_proof = None
        # Round 5
        self.beta_evaluations = None
        self.beta_opening = None

    def to_bytes(self):
        from zkp.marlin.serialization import encode_proof
        return encode_proof(self)

    @classmethod
    def from_bytes(cls, data):
        from zkp.marlin.serialization import decode_proof
        return decode_proof(data)

    def __eq__(self, other):
        return isinstance(other, Proof) and self.to_bytes() == other.to_bytes()
