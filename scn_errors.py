"""
scn_errors.py — erreurs levées par le décodeur de scénarios (.scn).

Toutes dérivent de ScenarioError (elle-même un ValueError) : un appelant
n'a qu'une seule exception à attraper, la sous-classe indique la raison.
"""
from __future__ import annotations


class ScenarioError(ValueError):
    """Décodage impossible ; l'attribut `kind` nomme la raison."""
    kind = "ScenarioError"


class UnrecognizedVersion(ScenarioError):
    kind = "UnrecognizedVersion"

    def __init__(self, version: str):
        super().__init__(f"unrecognized scenario version {version!r}")
        self.version = version


class InstructionsTooLarge(ScenarioError):
    kind = "InstructionsTooLarge"

    def __init__(self, length: int, limit: int):
        super().__init__(f"instructions length {length} exceeds limit {limit}")
        self.length = length
        self.limit = limit


class DecompressionFailure(ScenarioError):
    kind = "DecompressionFailure"


class UnexpectedEndOfStream(ScenarioError):
    kind = "UnexpectedEndOfStream"

    def __init__(self, offset: int, wanted: int, got: int):
        super().__init__(f"EOF at 0x{offset:x}: wanted {wanted} bytes, got {got}")
        self.offset = offset
        self.wanted = wanted
        self.got = got


class MalformedField(ScenarioError):
    kind = "MalformedField"
