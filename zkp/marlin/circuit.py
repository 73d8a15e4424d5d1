"""
R1CS 회로 표현 (Rank-1 Constraint System)
===========================================

계산을 세 개의 희소 행렬 A, B, C로 표현한다:

    (A·z) ∘ (B·z) = C·z

  - z = (1, x₁, ..., x_l, w₁, ...) : 상수 1, 공개 입력 x, 비공개 witness w
  - ∘ : 원소별 곱 (Hadamard product)
  - 각 행 i가 제약 하나: (Σⱼ A[i,j]zⱼ)·(Σⱼ B[i,j]zⱼ) = Σⱼ C[i,j]zⱼ

**희소 행렬**:
  0이 아닌 원소만 (행, 열) → 값 으로 저장한다.
  원소 순회 순서는 항상 (행, 열) 오름차순이다. 인덱스 다항식이 이 순서로
  K 위에 배치되므로 순서가 결정론적이어야 한다.

**예제 회로**: x³ + x + 5 = 35 (x = 3)
  z = (1, out, x, v₁, v₂) = (1, 35, 3, 9, 27)

  | 제약 | A       | B | C   | 의미               |
  |------|---------|---|-----|--------------------|
  | 0    | x       | x | v₁  | x·x = v₁           |
  | 1    | v₁      | x | v₂  | v₁·x = v₂          |
  | 2    | v₂+x+5  | 1 | out | (v₂+x+5)·1 = out   |

사용 예시:
    >>> circuit, z = Circuit.x3_plus_x_plus_5_eq_35()
    >>> circuit.is_satisfied(z)  # True
"""

from zkp.marlin.field import FR


class SparseMatrix:
    """(행, 열) → FR 희소 행렬.

    속성:
        num_rows, num_cols: 행렬 크기
        entries: {(row, col): FR}, 0이 아닌 원소만
    """

    def __init__(self, num_rows, num_cols, entries=None):
        self.num_rows = num_rows
        self.num_cols = num_cols
        self.entries = {}
        for (row, col), value in (entries or {}).items():
            self.set(row, col, value)

    @classmethod
    def from_triplets(cls, triplets, num_rows, num_cols):
        """[(row, col, value), ...] → SparseMatrix. 같은 위치는 합산한다."""
        matrix = cls(num_rows, num_cols)
        for row, col, value in triplets:
            matrix.add(row, col, value)
        return matrix

    def _check_index(self, row, col):
        if not (0 <= row < self.num_rows and 0 <= col < self.num_cols):
            raise ValueError(f"행렬 인덱스 범위 초과: ({row}, {col})")

    def set(self, row, col, value):
        self._check_index(row, col)
        value = value if isinstance(value, FR) else FR(value)
        if value == 0:
            self.entries.pop((row, col), None)
        else:
            self.entries[(row, col)] = value

    def add(self, row, col, value):
        current = self.entries.get((row, col), FR(0))
        self.set(row, col, current + (value if isinstance(value, FR) else FR(value)))

    def get(self, row, col):
        return self.entries.get((row, col), FR(0))

    @property
    def nnz(self):
        return len(self.entries)

    def sorted_entries(self):
        """[(row, col, value), ...] 을 (행, 열) 오름차순으로."""
        return [(r, c, self.entries[(r, c)]) for r, c in sorted(self.entries)]

    def mul_vector(self, z, length=None):
        """M·z. length가 주어지면 결과를 0으로 패딩한다."""
        result = [FR(0)] * max(self.num_rows, length or 0)
        for (row, col), value in self.entries.items():
            result[row] = result[row] + value * z[col]
        return result

    def __eq__(self, other):
        return (isinstance(other, SparseMatrix)
                and self.num_rows == other.num_rows
                and self.num_cols == other.num_cols
                and self.entries == other.entries)

    def __repr__(self):
        return f"SparseMatrix({self.num_rows}x{self.num_cols}, nnz={self.nnz})"


class Circuit:
    """R1CS 회로.

    속성:
        a, b, c: SparseMatrix (num_constraints × num_variables)
        num_constraints: 제약 수
        num_variables: z의 길이 (상수 1 포함)
        num_public_inputs: 공개 입력 수 l (상수 1 제외)
    """

    def __init__(self, a, b, c, num_constraints, num_variables, num_public_inputs):
        if num_public_inputs + 1 > num_variables:
            raise ValueError("공개 입력 수가 변수 수를 초과합니다")
        for m in (a, b, c):
            if m.num_rows != num_constraints or m.num_cols != num_variables:
                raise ValueError(f"행렬 크기 불일치: {m}")
        self.a = a
        self.b = b
        self.c = c
        self.num_constraints = num_constraints
        self.num_variables = num_variables
        self.num_public_inputs = num_public_inputs

    @classmethod
    def from_triplets(cls, a, b, c, num_constraints, num_variables, num_public_inputs):
        """(row, col, value) 트리플렛 리스트 세 개로 회로를 만든다."""
        return cls(
            SparseMatrix.from_triplets(a, num_constraints, num_variables),
            SparseMatrix.from_triplets(b, num_constraints, num_variables),
            SparseMatrix.from_triplets(c, num_constraints, num_variables),
            num_constraints, num_variables, num_public_inputs,
        )

    @property
    def matrices(self):
        return {"a": self.a, "b": self.b, "c": self.c}

    @property
    def max_nnz(self):
        return max(self.a.nnz, self.b.nnz, self.c.nnz)

    def is_satisfied(self, z):
        """(A·z) ∘ (B·z) == C·z 인지 확인한다."""
        if len(z) != self.num_variables or z[0] != 1:
            return False
        z = [v if isinstance(v, FR) else FR(v) for v in z]
        az = self.a.mul_vector(z)
        bz = self.b.mul_vector(z)
        cz = self.c.mul_vector(z)
        return all(x * y == w for x, y, w in zip(az, bz, cz))

    def public_input(self, z):
        """z에서 공개 입력 x = z[1..l]을 꺼낸다."""
        return [v if isinstance(v, FR) else FR(v) for v in z[1:self.num_public_inputs + 1]]

    # ─── 예제 회로 ───

    @staticmethod
    def x3_plus_x_plus_5_eq_35():
        """x³ + x + 5 = 35 회로와 witness (x = 3).

        변수: z = (1, out, x, v₁, v₂), out은 공개 입력.

        Returns:
            tuple: (Circuit, z)
        """
        one, out, x, v1, v2 = 0, 1, 2, 3, 4
        a = [(0, x, 1), (1, v1, 1), (2, v2, 1), (2, x, 1), (2, one, 5)]
        b = [(0, x, 1), (1, x, 1), (2, one, 1)]
        c = [(0, v1, 1), (1, v2, 1), (2, out, 1)]
        circuit = Circuit.from_triplets(a, b, c, 3, 5, 1)
        z = [FR(1), FR(35), FR(3), FR(9), FR(27)]
        return circuit, z

    @staticmethod
    def square(value=5):
        """가장 작은 회로: x·x = y, y는 공개 입력.

        Returns:
            tuple: (Circuit, z) , z = (1, y, x)
        """
        a = [(0, 2, 1)]
        b = [(0, 2, 1)]
        c = [(0, 1, 1)]
        circuit = Circuit.from_triplets(a, b, c, 1, 3, 1)
        x = FR(value)
        return circuit, [FR(1), x * x, x]

    @staticmethod
    def power_chain(length, base=2):
        """vᵢ₊₁ = vᵢ · base 사슬. 공개 입력 (base, 결과).

        z = (1, base, result, v₁, ..., v_length), v₁ = base.
        제약 수 length + 1, 변수 수 length + 3.

        Returns:
            tuple: (Circuit, z)
        """
        if length < 1:
            raise ValueError("length는 1 이상이어야 합니다")
        one, b_idx, res_idx = 0, 1, 2
        v = [3 + i for i in range(length)]
        a, b, c = [], [], []
        # v₁ = base
        a.append((0, b_idx, 1))
        b.append((0, one, 1))
        c.append((0, v[0], 1))
        for i in range(1, length):
            a.append((i, v[i - 1], 1))
            b.append((i, b_idx, 1))
            c.append((i, v[i], 1))
        # 마지막 값은 공개 결과와 같다
        num_constraints = length + 1
        a.append((length, v[-1], 1))
        b.append((length, one, 1))
        c.append((length, res_idx, 1))
        circuit = Circuit.from_triplets(a, b, c, num_constraints, length + 3, 2)

        base = FR(base)
        values = [base]
        for _ in range(1, length):
            values.append(values[-1] * base)
        z = [FR(1), base, values[-1]] + values
        return circuit, z
