"""
Index-Private Marlin 오류 분류
================================

  | 예외                  | 발생 위치              | 의미                                  |
  |-----------------------|------------------------|---------------------------------------|
  | ConstraintUnsatisfied | Prover (증명 생성 전)  | witness가 A·z ∘ B·z = C·z 를 만족 안 함 |
  | DegreeBoundExceeded   | Indexer / KZG          | 회로(다항식)가 SRS 최대 차수를 초과    |
  | NotVanishing          | ZeroOverK / sumcheck   | 내부 불변식 위반 (Prover 측 버그)     |
  | DecodingError         | 역직렬화               | 잘못된 바이트열                        |
  | VerificationFailed    | Verifier               | 암호학적 검사 실패                     |

Verifier 측 실패는 운영 환경에서 하나의 VerificationFailed로 합쳐진다.
어떤 검사가 실패했는지(check)는 진단(diagnostic) 모드에서만 채워진다.
"""


class MarlinError(Exception):
    """모든 프로토콜 오류의 기반 클래스."""


class ConstraintUnsatisfied(MarlinError):
    """witness가 R1CS 제약을 만족하지 않는다. 증명은 생성되지 않는다."""


class DegreeBoundExceeded(MarlinError, ValueError):
    """다항식 차수 또는 회로 크기가 SRS가 지원하는 최대 차수를 넘는다."""


class NotVanishing(MarlinError):
    """소거 다항식으로 나누어 떨어지지 않는다."""


class DecodingError(MarlinError, ValueError):
    """직렬화된 바이트열이 올바른 형식이 아니다."""


class VerificationFailed(MarlinError):
    """증명 검증 실패.

    속성:
        check: 실패한 검사 이름. 진단 모드가 아니면 None.
    """

    def __init__(self, check=None):
        self.check = check
        if check is None:
            super().__init__("proof rejected")
        else:
            super().__init__(f"proof rejected: {check}")
