"""
Fiat-Shamir Transcript
=======================

대화식 프로토콜을 비대화식으로 바꾸기 위한 해시 트랜스크립트.

  - Prover는 지금까지의 모든 메시지를 해시하여 챌린지를 직접 생성한다.
  - Verifier는 같은 순서로 같은 데이터를 흡수(absorb)하여 챌린지를 재구성한다.

**흡수 형식**:
  모든 메시지는 label ‖ len(data) (4바이트 빅엔디안) ‖ data 로 추가된다.
  길이 접두사가 있으므로 (label, data) 경계가 모호해지지 않는다.

**챌린지**:
  SHA-256(state) mod r. 다이제스트는 다시 상태에 추가된다 (체이닝).

**프로토콜 챌린지 순서**:
  Round 2 → α (∉ H), η_A, η_B, η_C
  Round 2 → β₁ (∉ H)
  ZeroOverK(H) → ρ (∉ H), v
  ZeroOverK(K) → ρ (∉ K), v
  Round 5 → v
  Verifier → u (결합 페어링)

사용 예시:
    >>> t = Transcript(b"index-private-marlin")
    >>> t.append_commitment(b"w", commitment)
    >>> alpha = t.challenge_outside(b"alpha", domain_h)
"""

import hashlib

from zkp.marlin.field import FR, CURVE_ORDER, encode_fr, encode_g1


class Transcript:
    """SHA-256 기반 Fiat-Shamir 트랜스크립트.

    속성:
        state: 현재까지 누적된 해시 입력 바이트열

    보안 주의:
        - 모든 데이터는 레이블과 함께 추가하여 도메인 분리를 보장한다
        - 트랜스크립트 순서가 다르면 다른 챌린지가 생성된다
    """

    def __init__(self, label=b"index-private-marlin"):
        self.state = bytearray()
        self.append_message(b"protocol", label)

    def append_message(self, label, data):
        """label ‖ len ‖ data 를 추가한다."""
        data = bytes(data)
        self.state.extend(label)
        self.state.extend(len(data).to_bytes(4, "big"))
        self.state.extend(data)

    def append_scalar(self, label, scalar):
        self.append_message(label, encode_fr(scalar))

    def append_scalars(self, label, scalars):
        self.append_message(label, b"".join(encode_fr(s) for s in scalars))

    def append_point(self, label, point):
        """G1 점. 무한원점은 64바이트의 0."""
        self.append_message(label, encode_g1(point))

    def append_commitment(self, label, commitment):
        """Commitment (주 커밋먼트와 선택적 shifted 커밋먼트)."""
        self.append_message(label, commitment.to_bytes())

    def append_opening(self, label, proof):
        self.append_message(label, proof.to_bytes())

    def challenge_scalar(self, label):
        """현재 상태로부터 챌린지 스칼라를 생성한다.

        예시:
            >>> eta_a = t.challenge_scalar(b"eta_a")
            >>> eta_b = t.challenge_scalar(b"eta_b")
            # 상태가 갱신되므로 서로 다른 값
        """
        self.state.extend(label)
        h = hashlib.sha256(bytes(self.state)).digest()
        self.state.extend(h)
        return FR(int.from_bytes(h, "big") % CURVE_ORDER)

    def challenge_outside(self, label, domain):
        """domain 밖의 챌린지. 도메인 안에 떨어지면 다시 뽑는다.

        도메인 원소에서는 u_H, Z_H 등이 퇴화하므로 평가 점은 반드시 도메인 밖이어야 한다.
        """
        challenge = self.challenge_scalar(label)
        while domain.contains(challenge):
            challenge = self.challenge_scalar(label)
        return challenge
